"""Command-line front end for Preflight."""
