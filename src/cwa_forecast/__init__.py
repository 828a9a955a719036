"""CWA township weather forecasts, normalized."""

__version__ = "0.1.0"
