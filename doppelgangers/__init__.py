"""
Doppelgangers: find duplicate pull requests and issues through embedding visualization.
"""

__version__ = "0.1.0"
