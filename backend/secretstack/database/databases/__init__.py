"""
Database definitions and collection constants.
"""
from secretstack.database.databases import user_db

__all__ = ["user_db"]
