"""Echo mural — spatial simulation and interaction engine for the shared emotion canvas."""

__version__ = "0.1.0"
