#!/usr/bin/env python3
"""Entry point for the puregate CLI when run as python -m puregate.cli."""

if __name__ == "__main__":
    from puregate.cli.main import main

    main()
