"""Command line interface for bankbooks."""
