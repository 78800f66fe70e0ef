"""Entry point for ``python -m paper_studio``."""

import sys

from paper_studio.cli import main

if __name__ == "__main__":
    sys.exit(main())
