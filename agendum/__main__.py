"""
Package entry point.

Allows running the application via:

    python -m agendum

This simply forwards execution to agendum.cli.main().
"""

from agendum.cli import main

if __name__ == "__main__":
    main()
