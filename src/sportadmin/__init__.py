"""Administration backend for a sports-content taxonomy."""

__version__ = "0.1.0"
