"""AI Credit News content pipeline."""

__version__ = "0.1.0"
