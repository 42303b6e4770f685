"""Command line entry points for the route registry."""
