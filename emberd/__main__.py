"""Entry point for `python -m emberd`."""

from .cli import main

if __name__ == "__main__":
    main()
