"""Recipe Finder backend: cached access to an external recipe API."""

__version__ = "1.0.0"
