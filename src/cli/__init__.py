"""Command line interface for Levelup."""
