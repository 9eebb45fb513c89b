"""
mcspy - Memcache key inspection and usage reporting
"""

__version__ = "1.0.0"
