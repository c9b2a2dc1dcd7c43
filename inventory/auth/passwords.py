import logging

import bcrypt

from inventory.core import config

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes; longer passwords are refused, not truncated.
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Salted bcrypt hashing with a configurable work-cost factor."""

    def __init__(self, cost: int = config.BCRYPT_COST):
        self.cost = cost

    def hash(self, plaintext: str) -> str:
        encoded = plaintext.encode("utf-8")
        if not encoded:
            raise ValueError("Password cannot be empty.")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password cannot exceed {MAX_PASSWORD_BYTES} bytes.")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.cost)).decode("ascii")

    def verify(self, plaintext: str, hash_string: str) -> bool:
        if not plaintext or not hash_string:
            return False

        encoded = plaintext.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False

        try:
            return bcrypt.checkpw(encoded, hash_string.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is malformed; denying verification.")
            return False
