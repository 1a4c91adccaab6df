"""Facet layer rendering for procedurally generated worlds."""

__version__ = "0.1.0"
