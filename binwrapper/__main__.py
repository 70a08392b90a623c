"""
Entry point for running the wrapped binary as a module.

Usage: python -m binwrapper [ARGS...]
"""

from binwrapper.cli.launch import main

if __name__ == "__main__":
    main()
