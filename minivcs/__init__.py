"""minivcs: a small local version-control system."""

__version__ = "0.1.0"
