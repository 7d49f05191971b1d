"""puregate command-line interface."""
