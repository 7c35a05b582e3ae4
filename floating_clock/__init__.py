"""Always-on-top floating clock overlay showing system time plus a configurable offset."""

__version__ = "0.3.0"

__all__ = ["__version__"]
