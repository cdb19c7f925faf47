"""
Routers module.
"""
from secretstack.routers import auth, google, health, pages, secrets

__all__ = ["auth", "google", "health", "pages", "secrets"]
