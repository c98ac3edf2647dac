"""ReviewDesk -- review session controller for the CodeEdit workstation."""

__version__ = "0.1.0"
