"""Entry point for ``python -m puregate``."""

from puregate.cli.main import main

if __name__ == "__main__":
    main()
