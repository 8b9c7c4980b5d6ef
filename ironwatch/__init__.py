"""ironwatch: team article tracker for the iThome Ironman writing challenge."""

__version__ = "0.1.0"
