"""imagelinks HTTP API."""

__version__ = "1.3.0"
