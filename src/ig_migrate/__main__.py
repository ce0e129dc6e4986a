"""
Entry point for the ig-migrate CLI application.

This module provides the main entry point when running the package as a module:
    python -m ig_migrate
"""

from .cli import main

if __name__ == "__main__":
    main()
