"""VibeProxy command-line interface."""
