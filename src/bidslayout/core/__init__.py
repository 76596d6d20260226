"""Core domain logic package.

This package contains the data models, the filename grammar, the
exceptions and the repository facade of the layout.
"""
