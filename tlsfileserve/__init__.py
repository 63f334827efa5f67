"""A small multi-threaded HTTPS static file server."""

__version__ = "0.0.1"
__all__ = ["__version__"]