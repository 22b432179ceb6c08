"""Calendar and weather proxy for the personal schedule assistant app."""

__version__ = "1.0.0"
