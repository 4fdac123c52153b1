#!/usr/bin/env python3
"""Rewrite a message in a chosen tone with a local language model.

Usage:
    python compose.py                      # interactive
    python compose.py --tone diplomatic --audience client \\
        --text "The project is delayed"
"""

import sys

from composer.cli import main

if __name__ == '__main__':
    sys.exit(main())
