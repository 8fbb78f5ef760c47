"""Admin credential verification backed by a bcrypt hash."""

import bcrypt


def hash_token(token: str, rounds: int = 12) -> str:
    """Hash a plain text token using bcrypt, suitable for ADMIN_TOKEN_HASH."""
    token_bytes = token.encode('utf-8')
    return bcrypt.hashpw(token_bytes, bcrypt.gensalt(rounds=rounds)).decode('utf-8')


class AdminTokenVerifier:
    """Checks bearer tokens against the configured bcrypt hash.

    With no hash configured every token is rejected.
    """

    def __init__(self, token_hash: str | None):
        self._token_hash = token_hash.encode('utf-8') if token_hash else None

    @property
    def enabled(self) -> bool:
        return self._token_hash is not None

    def verify(self, token: str) -> bool:
        """Verify a plain text token against the stored hash."""
        if self._token_hash is None or not token:
            return False
        try:
            return bcrypt.checkpw(token.encode('utf-8'), self._token_hash)
        except ValueError:
            # Malformed stored hash
            return False
