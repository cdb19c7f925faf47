"""
Service layer for business logic.
"""
from secretstack.services.auth_service import CredentialVerifier
from secretstack.services.identity_bridge import GoogleIdentityBridge, HandshakeState
from secretstack.services.session_manager import SessionManager
from secretstack.services.user_store import UserStore

__all__ = [
    "CredentialVerifier",
    "GoogleIdentityBridge",
    "HandshakeState",
    "SessionManager",
    "UserStore",
]
