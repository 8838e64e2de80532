"""Personal auto insurance rating, quote lifecycle and policy binding."""

__version__ = "0.1.0"
