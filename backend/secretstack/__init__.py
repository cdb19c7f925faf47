"""
Secret Stack - share secrets anonymously.
"""
__version__ = "0.1.0"
