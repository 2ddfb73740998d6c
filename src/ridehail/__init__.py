"""In-memory ride-hailing service: ride lifecycle, fares, auth and an AI proxy."""

__version__ = "1.0.0"
