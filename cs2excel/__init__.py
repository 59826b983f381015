"""Keep a CS2 inventory spreadsheet up to date with Steam items and market prices."""

__version__ = "0.1.4"