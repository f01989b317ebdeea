"""
remsh CLI entry point.

Usage:
    python -m remsh my-server
    python -m remsh my-server uptime
"""

from remsh.cli import main

if __name__ == "__main__":
    main()
