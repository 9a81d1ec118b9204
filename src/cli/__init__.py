"""Command-line entry points for the artwork token tooling."""
