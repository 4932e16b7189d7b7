"""
Shopify Bulk Editor.
"""

__version__ = "1.0.0"
