"""linkcheck — concurrent link health and title report."""

__version__ = "0.1.0"
