"""Gold 2 Money loan application API."""

__version__ = "0.1.0"
