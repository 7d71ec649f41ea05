"""Command line interface for the headless delivery client."""
