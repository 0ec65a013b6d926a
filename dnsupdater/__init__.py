"""Asynchronous DNS record management: record model, HTTP provider clients and BIND rendering."""

__version__ = "0.2.6"