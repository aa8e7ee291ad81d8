#!/usr/bin/env python3
"""
VobSrt Entry Point Script

This script initializes the CLI handler and runs the IDX/SUB to SRT conversion.
"""

import sys
from vobsrt.cli import CLIHandler

if __name__ == "__main__":
    if sys.version_info < (3, 8):
        sys.stderr.write("VobSrt requires Python 3.8 or later.\n")
        sys.exit(1)

    cli = CLIHandler()
    cli.run()
