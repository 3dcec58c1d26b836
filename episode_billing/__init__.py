"""Time tracking and invoicing for podcast editing."""

__version__ = "1.0.0"
