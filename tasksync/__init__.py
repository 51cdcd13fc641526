"""Monorail to Hansoft task synchronization"""

__version__ = "1.0.0"
