"""
Entry point for running Sproutling as a module.

Usage:
    python -m sproutling lesson math 1
    python -m sproutling stats reading
    python -m sproutling --help
"""
from sproutling.cli.main import main

if __name__ == "__main__":
    main()
