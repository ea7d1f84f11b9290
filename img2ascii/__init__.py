"""Web service and library for turning images and text banners into ASCII art."""

__version__ = "0.1.0"