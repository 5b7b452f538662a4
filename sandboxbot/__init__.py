"""
Sandboxbot - lifecycle sweeper for sandbox spaces on a Cloud Foundry platform.

This package classifies sandbox spaces by the age of their oldest resource,
warns the people working in them, and resets spaces that outlived the
configured purge threshold.
"""

__version__ = "0.1.0"
