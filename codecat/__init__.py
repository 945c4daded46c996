"""Concatenate a project's source files into one annotated text stream."""

__version__ = "0.4.0"
__all__ = ["__version__"]