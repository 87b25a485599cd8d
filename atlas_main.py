#!/usr/bin/env python3
"""
Atlas Weekly Export CLI

Usage:
    python atlas_main.py                        # Last full week, visible browser
    python atlas_main.py --headless             # Headless browser
    python atlas_main.py --date 2024-03-13      # Week ending on/before a given date

Reads ATLAS_USERNAME / ATLAS_PASSWORD (and optional overrides) from .env.
Exits with status 1 if any step fails.
"""

import sys

from scrapers.orchestrator import main


if __name__ == "__main__":
    sys.exit(main())
