"""Shell-like interactive command line for an Antbox content server, driven through a supplied client."""

__version__ = "0.1.0"