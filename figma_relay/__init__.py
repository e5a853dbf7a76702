"""
Figma Relay: authenticated screen enrichment for Figma design files.
"""

__version__ = '1.0.0'
