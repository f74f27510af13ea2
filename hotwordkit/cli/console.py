#!/usr/bin/env python3
"""
Console script entry point for the hotwordkit CLI.
This allows the package to be called as 'hotwordkit' from the command line.
"""

from .main import main

def cli_entry_point():
    """Entry point for the hotwordkit console command."""
    main()

if __name__ == '__main__':
    cli_entry_point()
