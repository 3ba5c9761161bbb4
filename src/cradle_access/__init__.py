"""Authorization core for the smart cradle platform."""

__version__ = "0.1.0"
