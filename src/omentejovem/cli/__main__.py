"""CLI entry point for omentejovem.cli module.

Enables execution via: python -m omentejovem.cli portfolio
"""

from omentejovem.cli.fetch_gallery import main

if __name__ == "__main__":
    main()
