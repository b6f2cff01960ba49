"""Command-line interface for eqresolve."""
