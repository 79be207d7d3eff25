"""IBEX 35 remote data access and client-side analytics."""

__version__ = "1.0.0"
