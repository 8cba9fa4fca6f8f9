"""emberd CLI for building, testing and serving ember apps.

Provides commands that drive ember_library from a terminal or deploy script.
"""

import logging
import sys
from pathlib import Path

import click

from ember_library.app import CONFIGURED_TIMEOUT
from ember_library.config.loader import load_config
from ember_library.errors import BuildError
from ember_library.errors import BuildTimeoutError
from ember_library.errors import EmberCliError
from ember_library.registry import EmberCli

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def select_apps(registry: EmberCli, names: tuple[str, ...]) -> list:
    """Resolve app names, or every registered app when none are given."""
    if not names:
        return list(registry)

    apps = []
    for name in names:
        if name not in registry:
            raise click.BadParameter(f"Unknown ember app: {name}", param_hint="NAME")
        apps.append(registry[name])
    return apps


def report_build_error(error: BuildError) -> None:
    click.echo(f"Error: {error.message}", err=True)
    for line in error.trace[1:]:
        click.echo(f"  {line}", err=True)


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to ember-cli.yaml (default: config/ember-cli.yaml)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool):
    """emberd - ember-cli build coordination."""
    settings = load_config(config_path)
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format=LOG_FORMAT,
    )
    ctx.obj = {"settings": settings, "registry": EmberCli.from_settings(settings)}


@cli.command()
@click.argument("names", nargs=-1)
@click.pass_obj
def compile(obj: dict, names: tuple[str, ...]):
    """Build apps once (all configured apps by default)."""
    try:
        for app in select_apps(obj["registry"], names):
            click.echo(f"Compiling {app.name}...")
            app.compile()
            click.echo(f"{app.name} compiled")
    except BuildError as e:
        report_build_error(e)
        sys.exit(1)
    except EmberCliError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("names", nargs=-1)
@click.pass_obj
def install(obj: dict, names: tuple[str, ...]):
    """Install npm, bower and bundler dependencies for apps."""
    try:
        for app in select_apps(obj["registry"], names):
            click.echo(f"Installing dependencies for {app.name}...")
            app.install_dependencies()
    except EmberCliError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("name")
@click.pass_obj
def test(obj: dict, name: str):
    """Run `ember test` for one app."""
    (app,) = select_apps(obj["registry"], (name,))
    try:
        app.run_tests()
    except EmberCliError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"{app.name} tests passed")


@cli.command()
@click.argument("names", nargs=-1)
@click.option("--timeout", type=float, default=None, help="Seconds to wait before giving up")
@click.pass_obj
def wait(obj: dict, names: tuple[str, ...], timeout: float | None):
    """Block until in-progress builds finish."""
    try:
        for app in select_apps(obj["registry"], names):
            app.wait(timeout=CONFIGURED_TIMEOUT if timeout is None else timeout)
            click.echo(f"{app.name} ready")
    except BuildError as e:
        report_build_error(e)
        sys.exit(1)
    except BuildTimeoutError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)


@cli.command()
@click.pass_obj
def status(obj: dict):
    """Show build state of configured apps."""
    registry: EmberCli = obj["registry"]

    click.echo(f"Environment: {registry.context.environment}")
    click.echo("-" * 40)

    if not len(registry):
        click.echo("No apps configured")
        return

    for app in registry:
        if app.build_error():
            state = "✗ Build failed"
        elif app.paths.lockfile.exists():
            state = "… Building"
        else:
            state = "✓ Ready"
        click.echo(f"{app.name:<20} {state}")


@cli.command()
@click.option("--host", default=None, help="Listen address (default from config)")
@click.option("--port", type=int, default=None, help="Listen port (default from config)")
@click.pass_obj
def serve(obj: dict, host: str | None, port: int | None):
    """Serve configured apps over HTTP."""
    import uvicorn

    from .main import create_app

    settings = obj["settings"]
    app = create_app(registry=obj["registry"])
    uvicorn.run(
        app,
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


def main():
    """Entry point for emberd CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nInterrupted")
        sys.exit(0)


if __name__ == "__main__":
    main()
