#!/usr/bin/env python3
"""
Convenience entry point for running salonseed directly.

Usage: python seed.py [command] [options]
"""

from salonseed.cli.app import app

if __name__ == "__main__":
    app()
