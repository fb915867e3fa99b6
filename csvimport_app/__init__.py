"""Command-line front end for the csvimport package."""

__version__ = "0.1.0"
