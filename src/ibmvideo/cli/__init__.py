"""Command-line interface package for the IBM Video embed toolkit."""

from ibmvideo.cli.main import CLIApplication, create_app, main

__all__ = ["CLIApplication", "create_app", "main"]
