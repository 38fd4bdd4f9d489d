#!/usr/bin/env python3
"""Simple runner script for mdlinks."""

import sys


def main():
    args = sys.argv[1:]
    if "--help" in args or "-h" in args:
        print("""
mdlinks - extract links from Markdown files

Usage:
    python run.py [options] FILE...

Options:
    -j, --json            Pretty JSON array output
    -s, --separator SEP   Delimited output using SEP
    key=value             Any config override (e.g. output.header=true)
    -h, --help            Show this help

Examples:
    python run.py README.md docs
    python run.py -s , notes.md output.header=true
""")
        return

    try:
        from mdlinks.errors import ConfigurationError
        from mdlinks.main import EXIT_CONFIGURATION_ERROR, args_to_overrides, main as mdlinks_main
    except ImportError as e:
        print(f"Module import failed: {e}")
        print("\nInstall with:")
        print("  pip install -e .")
        sys.exit(1)

    try:
        overrides = args_to_overrides(args)
    except ConfigurationError as e:
        print(e, file=sys.stderr)
        sys.exit(EXIT_CONFIGURATION_ERROR)

    sys.argv = [sys.argv[0], *overrides]
    mdlinks_main()


if __name__ == "__main__":
    main()
