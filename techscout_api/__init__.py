"""TechScout API: technology analysis reports from topics, documents and URLs."""

__version__ = "0.1.0"
