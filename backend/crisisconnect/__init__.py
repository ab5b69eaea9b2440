"""Crisis Connect disaster-response backend."""

__version__ = "0.1.0"
