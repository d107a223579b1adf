"""Static site generator for flat-file blog repositories."""

__version__ = "1.0.0"
