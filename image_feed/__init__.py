"""Image Feed data-access core."""

__version__ = "0.1.0"
