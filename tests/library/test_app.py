"""
Unit tests for the EmberApp build lifecycle.

Tests prepare/compile memoization, build error detection, index.html
resolution, asset paths and the subprocess environment. Builds are
simulated by the FakeShell fixture.
"""

import json
import threading
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from ember_library.app import EmberApp
from ember_library.config.models import HostContext
from ember_library.errors import BuildError


@pytest.mark.unit
class TestPrepare:
    """Test prepare side effects and idempotence."""

    def test_prepare_links_app_assets_to_dist(self, make_app) -> None:
        """Test prepare symlinks the namespaced asset dir to the build output."""
        app = make_app()

        app.prepare()

        assert app.paths.app_assets.is_symlink()
        assert app.paths.app_assets.resolve() == app.paths.dist.resolve()
        assert app.prepared

    def test_prepare_links_relative_tool_root(
        self, make_app, host_root: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test a relative tool_root still yields a link that resolves."""
        monkeypatch.chdir(host_root)
        context = HostContext(environment="development", root_path=host_root, tool_root=Path("tmp/ember-cli"))
        app = make_app(host=context)

        app.prepare()

        link = host_root / "tmp" / "ember-cli" / "assets" / "frontend"
        assert link.is_symlink()
        assert link.exists()
        assert link.resolve() == (host_root / "tmp" / "ember-cli" / "apps" / "frontend").resolve()

    def test_prepare_registers_asset_pattern(self, make_app, context: HostContext) -> None:
        """Test prepare registers the app namespace with both pipeline lists."""
        app = make_app()

        app.prepare()

        assert context.pipeline.precompiled("frontend/assets/vendor.js")
        assert context.pipeline.whitelisted("frontend/assets/my-app.css")
        assert not context.pipeline.precompiled("other/assets/vendor.js")
        assert not context.pipeline.precompiled("assets/frontend/vendor.js")

    def test_prepare_is_idempotent(self, make_app, context: HostContext) -> None:
        """Test repeated prepare calls leave the same state as one call."""
        app = make_app()

        app.prepare()
        app.prepare()
        app.prepare()

        assert len(context.pipeline.precompile) == 1
        assert len(context.pipeline.digest_whitelist) == 1
        assert app.paths.app_assets.is_symlink()

    def test_prepare_ignores_existing_symlink(self, make_app, context: HostContext) -> None:
        """Test a symlink left by another worker is not an error."""
        app = make_app()
        app.paths.app_assets.symlink_to(app.paths.dist, target_is_directory=True)

        app.prepare()

        assert app.paths.app_assets.is_symlink()
        assert app.prepared

    def test_prepare_propagates_other_symlink_errors(self, make_app) -> None:
        """Test filesystem errors other than 'already exists' propagate."""
        app = make_app()

        with patch.object(Path, "symlink_to", side_effect=PermissionError("denied")):
            with pytest.raises(PermissionError, match="denied"):
                app.prepare()

        assert not app.prepared

    def test_prepare_removes_stale_build_error(self, make_app) -> None:
        """Test a build error file from an earlier run is deleted."""
        app = make_app()
        app.paths.build_error_file.write_text("Error: old failure\n")

        app.prepare()

        assert not app.paths.build_error_file.exists()

    def test_concurrent_prepare_from_two_workers(self, make_app, host_root: Path) -> None:
        """Test two independent instances preparing the same app both succeed."""
        contexts = [
            HostContext(environment="development", root_path=host_root, tool_root=host_root / "tmp" / "ember-cli")
            for _ in range(2)
        ]
        apps = [make_app(host=c) for c in contexts]
        barrier = threading.Barrier(len(apps))
        errors: list[BaseException] = []

        def prepare(app: EmberApp) -> None:
            barrier.wait()
            try:
                app.prepare()
            except BaseException as e:
                errors.append(e)

        threads = [threading.Thread(target=prepare, args=(app,)) for app in apps]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert all(app.prepared for app in apps)
        link = apps[0].paths.app_assets
        assert link.is_symlink()
        assert link.resolve() == apps[0].paths.dist.resolve()
        assert [p.name for p in link.parent.iterdir()] == ["frontend"]


@pytest.mark.unit
class TestCompile:
    """Test one-shot builds and build error handling."""

    def test_compile_returns_true_and_builds(self, make_app) -> None:
        """Test compile prepares, builds and reports success."""
        app = make_app()

        assert app.compile() is True

        assert app.compiled
        assert app.prepared
        assert app.shell.calls == ["compile"]
        assert (app.paths.dist / "index.html").exists()

    def test_compile_is_memoized(self, make_app) -> None:
        """Test repeated compile calls do not rebuild."""
        app = make_app()

        app.compile()
        app.compile()

        assert app.shell.calls == ["compile"]

    def test_compile_raises_build_error(self, make_app) -> None:
        """Test compile surfaces the build error file as BuildError."""
        app = make_app()
        app.shell.error = "Error: foo\nat bar.js:1\n"

        with pytest.raises(BuildError) as exc_info:
            app.compile()

        error = exc_info.value
        assert "foo" in str(error)
        assert str(error) == '"frontend" has failed to build: Error: foo'
        assert error.trace == ["Error: foo", "at bar.js:1"]
        assert error.app_name == "frontend"
        assert error.summary == "Error: foo"

    def test_build_error_trace_skips_blank_lines(self, make_app) -> None:
        """Test blank lines are dropped from the message and trace."""
        app = make_app()
        app.shell.error = "\n\n  \nSyntaxError: unexpected token\n\n    at app/router.js:12\n"

        with pytest.raises(BuildError) as exc_info:
            app.compile()

        assert exc_info.value.message.endswith("SyntaxError: unexpected token")
        assert exc_info.value.trace == ["SyntaxError: unexpected token", "    at app/router.js:12"]

    def test_failed_compile_is_not_memoized(self, make_app) -> None:
        """Test a failed build runs again on the next compile call."""
        app = make_app()
        app.shell.error = "Error: broken\n"

        with pytest.raises(BuildError):
            app.compile()
        assert not app.compiled

        def fixed_build() -> None:
            app.paths.build_error_file.unlink()
            (app.paths.dist / "index.html").write_text("<html></html>")

        app.shell.on_compile = fixed_build

        assert app.compile() is True
        assert app.shell.calls == ["compile", "compile"]

    def test_stale_error_does_not_fail_next_build(self, make_app) -> None:
        """Test an error file left before prepare does not fail a good build."""
        app = make_app()
        app.paths.build_error_file.write_text("Error: from last deploy\n")

        assert app.compile() is True

    def test_empty_error_file_is_not_a_build_error(self, make_app) -> None:
        """Test a zero-byte error file is ignored."""
        app = make_app()

        def build_with_empty_error_file() -> None:
            app.paths.build_error_file.write_text("")
            (app.paths.dist / "index.html").write_text("<html></html>")

        app.shell.on_compile = build_with_empty_error_file

        assert app.compile() is True
        assert not app.build_error()

    def test_build_error_requires_existing_file(self, make_app) -> None:
        app = make_app()

        assert not app.build_error()
        app.check_for_build_error()

        app.paths.build_error_file.write_text("Error: x\n")
        assert app.build_error()

    def test_concurrent_compile_builds_once(self, make_app) -> None:
        """Test two request threads compiling the same app run one build."""
        app = make_app()

        def slow_build() -> None:
            time.sleep(0.1)
            app.shell._build()

        app.shell.on_compile = slow_build
        barrier = threading.Barrier(2)
        results: list[bool] = []

        def compile_app() -> None:
            barrier.wait()
            results.append(app.compile())

        threads = [threading.Thread(target=compile_app) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == [True, True]
        assert app.shell.calls == ["compile"]


@pytest.mark.unit
class TestRun:
    """Test dev server lifecycle delegation."""

    def test_run_prepares_and_starts_dev_server(self, make_app) -> None:
        app = make_app()

        app.run()

        assert app.prepared
        assert app.running()
        assert app.shell.calls == ["run"]

    def test_run_is_not_memoized(self, make_app) -> None:
        """Test run delegates on every call so a dead server is restarted."""
        app = make_app()

        app.run()
        app.run()

        assert app.shell.calls == ["run", "run"]

    def test_running_delegates_to_shell(self, make_app) -> None:
        app = make_app()

        assert not app.running()
        app.run()
        assert app.running()
        app.stop()
        assert not app.running()

    def test_run_tests_prepares_first(self, make_app) -> None:
        app = make_app()

        result = app.run_tests()

        assert result == "tests passed"
        assert app.prepared
        assert app.shell.calls == ["test"]

    def test_install_dependencies_skips_prepare(self, make_app) -> None:
        app = make_app()

        app.install_dependencies()

        assert app.shell.calls == ["install"]
        assert not app.prepared
        assert not app.paths.app_assets.exists()


@pytest.mark.unit
class TestIndexHtml:
    """Test environment-dependent index.html resolution."""

    def test_development_reads_dist_index_live(self, make_app) -> None:
        """Test development always reads the dev server's latest index.html."""
        app = make_app()
        app.run()

        first = app.index_html()
        (app.paths.dist / "index.html").write_text("<html><head></head><body>rebuilt</body></html>")
        second = app.index_html()

        assert "my-app" in first
        assert "rebuilt" in second
        assert app.index_file == app.paths.dist / "index.html"

    def test_production_serves_cached_copy(self, make_app, production_context: HostContext) -> None:
        """Test production serves the copy taken after the build."""
        app = make_app(host=production_context)
        app.compile()

        cached = app.paths.applications / "frontend.html"
        assert cached.exists()
        assert app.index_file == cached

        first = app.index_html()
        (app.paths.dist / "index.html").write_text("<html><body>changed</body></html>")
        app.compile()
        second = app.index_html()

        assert first == second
        assert "changed" not in second

    def test_development_does_not_copy(self, make_app) -> None:
        app = make_app()

        app.compile()

        assert not (app.paths.applications / "frontend.html").exists()

    def test_index_html_injects_fragments(self, make_app) -> None:
        app = make_app()
        app.compile()

        html = app.index_html(head='<meta name="csrf-token" content="abc">', body="<script>boot()</script>")

        assert '<meta name="csrf-token" content="abc"></head>' in html
        assert "<script>boot()</script></body>" in html

    def test_index_html_renders_per_call(self, make_app) -> None:
        """Test fragments from one request do not leak into the next."""
        app = make_app()
        app.compile()

        app.index_html(head="<meta name=first>")
        html = app.index_html(head="<meta name=second>")

        assert "first" not in html
        assert "second" in html


@pytest.mark.unit
class TestAssetPaths:
    """Test asset logical paths."""

    def test_vendor_assets(self, make_app) -> None:
        assert make_app().vendor_assets == "frontend/assets/vendor"

    def test_application_assets_from_package_json(self, make_app) -> None:
        """Test the app name is read from package.json when not configured."""
        app = make_app()

        assert app.application_assets == "frontend/assets/my-app"
        assert app.exposed_js_assets == ["frontend/assets/vendor", "frontend/assets/my-app"]
        assert app.exposed_css_assets == app.exposed_js_assets

    def test_name_option_takes_precedence(self, make_app) -> None:
        """Test the name option wins and package.json is never read."""
        app = make_app(name="custom-name")
        app.paths.package_json_file.unlink()

        assert app.application_assets == "frontend/assets/custom-name"

    def test_package_json_is_read_once(self, make_app) -> None:
        app = make_app()
        assert app.ember_app_name == "my-app"

        app.paths.package_json_file.write_text(json.dumps({"name": "renamed"}))

        assert app.application_assets == "frontend/assets/my-app"


@pytest.mark.unit
class TestEnvHash:
    """Test environment variables passed to the build process."""

    def test_env_hash_sets_environment_and_exclusions(self, context: HostContext) -> None:
        app = EmberApp("frontend", context, exclude_ember_deps=["jquery", "moment"])

        env = app.env_hash()

        assert env["RAILS_ENV"] == "development"
        assert env["EXCLUDE_EMBER_ASSETS"] == "jquery,moment"
        assert "BUNDLE_GEMFILE" not in env

    def test_env_hash_accepts_single_exclusion(self, context: HostContext) -> None:
        app = EmberApp("frontend", context, exclude_ember_deps="jquery")

        assert app.env_hash()["EXCLUDE_EMBER_ASSETS"] == "jquery"

    def test_env_hash_defaults_to_empty_exclusions(self, context: HostContext) -> None:
        app = EmberApp("frontend", context)

        assert app.env_hash()["EXCLUDE_EMBER_ASSETS"] == ""

    def test_env_hash_includes_gemfile_when_present(self, context: HostContext) -> None:
        app = EmberApp("frontend", context)
        app.paths.root.mkdir(parents=True)
        app.paths.gemfile.write_text('source "https://rubygems.org"\n')

        env = app.env_hash()

        assert env["BUNDLE_GEMFILE"] == str(app.paths.gemfile)

    def test_env_hash_inherits_process_environment(self, context: HostContext, monkeypatch) -> None:
        monkeypatch.setenv("NODE_OPTIONS", "--max-old-space-size=4096")
        app = EmberApp("frontend", context)

        assert app.env_hash()["NODE_OPTIONS"] == "--max-old-space-size=4096"
