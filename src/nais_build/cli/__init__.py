"""nb command line interface."""
