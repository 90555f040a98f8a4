"""JSON API for order management: handlers, routing and models served over WSGI."""

__version__ = "0.1.0"

__all__ = [
    "addresses",
    "commodity_attributes",
    "companies",
    "locations",
    "models",
    "public",
    "web",
]