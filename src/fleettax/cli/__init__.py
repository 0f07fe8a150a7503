"""Command line interface for fleettax."""
