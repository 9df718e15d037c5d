"""Element abstraction layer for Android UI automation."""

__version__ = "0.3.0"
