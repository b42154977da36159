"""Fleet maintenance bot that applies cleanup passes across many repositories."""

__version__ = "0.1.0"
