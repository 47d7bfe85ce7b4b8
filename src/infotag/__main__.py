"""
Main entry point for running infotag as a module.
Allows: python -m infotag ...
"""
import sys
from .cli import main

if __name__ == "__main__":
    sys.exit(main())
