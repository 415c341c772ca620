# ehr_api/tokens.py
"""
Signed, self-contained session tokens.

Tokens are HS256 JWTs carrying the user's identity claims plus ``iat`` and
``exp`` in epoch seconds. Nothing is stored server side, so a token is valid
exactly while its signature checks out against a configured secret and the
clock is before ``exp``.

Rotation: the current secret signs, and every secret in ``previous_secrets``
still verifies. Tokens signed with a retired secret stop working as soon as
that secret is dropped from the list.
"""
import time
from datetime import timedelta
from typing import Callable, Iterable, Optional

from jose import JWTError, jwt

from .config import JWT_ALGORITHM
from .errors import InvalidToken

CLAIM_FIELDS = ("id", "name", "email", "photo", "role")


class TokenService:
    def __init__(
        self,
        secret: str,
        previous_secrets: Iterable[str] = (),
        ttl: timedelta = timedelta(hours=24),
        clock: Callable[[], float] = time.time,
    ):
        if not secret:
            raise ValueError("a signing secret is required")
        self._secret = secret
        self._verify_keys = [secret] + [s for s in previous_secrets if s and s != secret]
        self.ttl = ttl
        self._clock = clock

    def issue(self, claims: dict, ttl: Optional[timedelta] = None) -> str:
        now = int(self._clock())
        lifetime = ttl if ttl is not None else self.ttl
        payload = {key: claims.get(key) for key in CLAIM_FIELDS}
        payload["iat"] = now
        payload["exp"] = now + int(lifetime.total_seconds())
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> dict:
        if not token:
            raise InvalidToken()

        payload = None
        for key in self._verify_keys:
            try:
                # expiry is checked below against the injected clock
                payload = jwt.decode(
                    token,
                    key,
                    algorithms=[JWT_ALGORITHM],
                    options={"verify_exp": False},
                )
                break
            except JWTError:
                continue
        if payload is None:
            raise InvalidToken()

        exp = payload.get("exp")
        if not isinstance(exp, int) or self._clock() >= exp:
            raise InvalidToken()
        return payload
