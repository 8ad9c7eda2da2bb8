"""
Painter booking engine entry point.

Usage:
    python main.py init-db
    python main.py seed
    python main.py book --user customer-1 --start 2025-01-10T10:00Z \
        --end 2025-01-10T14:00Z --address "123 Main St"
"""

import sys

from painter_booking.cli import main

if __name__ == "__main__":
    sys.exit(main())
