"""
Spectral Report - offline spectrum analysis with CSV table export.
"""

__version__ = "1.0.0"
