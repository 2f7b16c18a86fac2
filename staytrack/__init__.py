"""
staytrack - travel history normalization and Schengen 90/180 compliance.
"""

__version__ = "1.0.0"
