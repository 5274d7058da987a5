"""
salonseed - seeding and migration tooling for the salon booking database.
"""

__version__ = "0.1.0"
