"""Email booking import engine."""

__version__ = "1.0.0"
