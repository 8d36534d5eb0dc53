"""
Pattern vectorizer: photographs of sewing patterns to 1:1 vector outlines.
"""

__version__ = "0.1.0"
