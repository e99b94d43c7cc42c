"""
Bookstore catalog integrity engine
"""

__version__ = "1.0.0"
