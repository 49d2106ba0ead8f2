"""Entry point for ``python -m hmscache``."""

from .cli.main import main

if __name__ == "__main__":
    main()
