"""Scribo: review blog posts against guidelines and a checklist."""

__version__ = "0.1.0"
