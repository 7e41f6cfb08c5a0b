"""Vehicle routing search engine with a compact graph core and an HTTP front end."""

__version__ = "0.1.0"
