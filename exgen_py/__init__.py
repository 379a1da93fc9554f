"""exgen_py - CLI client for generating judge exercises with AI."""

__version__ = "1.0.0"
