#!/usr/bin/env python3
"""
Main CLI for Font Finder
========================

Entry point for running the CLI from a source checkout.
"""

from fontfinder.cli import cli

if __name__ == "__main__":
    cli()
