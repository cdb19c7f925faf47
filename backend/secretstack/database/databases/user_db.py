"""
User database configuration.
Stores user identity, credentials and secrets.
"""


class Collections:
    """Collection names in the user database."""
    USERS = "users"


class Fields:
    """Document keys in the users collection."""
    ID = "_id"
    USERNAME = "username"
    HASHED_PASSWORD = "hashed_password"
    GOOGLE_ID = "google_id"
    SECRETS = "secrets"
    CREATED_AT = "created_at"


class RedisKeys:
    """Key prefixes for ephemeral state kept in Redis."""
    SESSION = "session:"
    OAUTH_STATE = "oauth_state:"
