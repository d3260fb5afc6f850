"""
Allow running the page list CLI as a module.

Usage:
    python -m pagelist directives.txt --database wiki.db
"""

from .cli import main
import sys

if __name__ == "__main__":
    sys.exit(main())
