#!/usr/bin/env python3
"""Main entry point for the cmdlex tool."""

import sys
from cmdlex.commands import main


def run() -> None:
    """Run the CLI, mapping failures to exit codes."""
    try:
        main()
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    run()
