"""MediaHub server configuration core."""

__version__ = "0.1.0"
