# ehr_api/passwords.py
from passlib.hash import bcrypt


class PasswordHasher:
    """bcrypt hashing with a tunable work factor."""

    def __init__(self, rounds: int = 10):
        self._handler = bcrypt.using(rounds=rounds)

    def hash(self, plaintext: str) -> str:
        return self._handler.hash(plaintext)

    def verify(self, plaintext: str, hashed: str) -> bool:
        # An unreadable stored hash is a mismatch, never an error for the caller.
        if not plaintext or not hashed:
            return False
        try:
            return self._handler.verify(plaintext, hashed)
        except (ValueError, TypeError):
            return False
