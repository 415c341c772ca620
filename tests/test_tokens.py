import base64
import json
from datetime import timedelta

import pytest

from ehr_api.errors import InvalidToken
from ehr_api.tokens import TokenService

CLAIMS = {"id": 7, "name": "Ann", "email": "ann@x.com", "photo": None, "role": "Patient"}


class FakeClock:
    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_issued_token_carries_identity_claims():
    clock = FakeClock(1_000)
    tokens = TokenService("secret", ttl=timedelta(minutes=1), clock=clock)

    claims = tokens.verify(tokens.issue(CLAIMS))

    for key, value in CLAIMS.items():
        assert claims[key] == value
    assert claims["iat"] == 1_000
    assert claims["exp"] == 1_060


def test_token_expires_at_exactly_its_expiry_instant():
    clock = FakeClock(1_000)
    tokens = TokenService("secret", ttl=timedelta(minutes=1), clock=clock)
    token = tokens.issue(CLAIMS)

    clock.now = 1_059.999
    assert tokens.verify(token)["id"] == 7

    clock.now = 1_060
    with pytest.raises(InvalidToken):
        tokens.verify(token)

    clock.now = 5_000
    with pytest.raises(InvalidToken):
        tokens.verify(token)


def test_issue_accepts_a_per_call_ttl():
    clock = FakeClock(0)
    tokens = TokenService("secret", ttl=timedelta(hours=24), clock=clock)
    token = tokens.issue(CLAIMS, ttl=timedelta(seconds=5))

    clock.now = 5
    with pytest.raises(InvalidToken):
        tokens.verify(token)


def test_token_signed_with_another_secret_is_rejected():
    foreign = TokenService("someone-else").issue(CLAIMS)
    with pytest.raises(InvalidToken):
        TokenService("secret").verify(foreign)


def test_tampered_payload_is_rejected():
    tokens = TokenService("secret")
    header, payload, signature = tokens.issue(CLAIMS).split(".")

    claims = json.loads(base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4)))
    claims["role"] = "Admin"
    forged = base64.urlsafe_b64encode(json.dumps(claims).encode()).rstrip(b"=").decode()

    with pytest.raises(InvalidToken):
        tokens.verify(f"{header}.{forged}.{signature}")


@pytest.mark.parametrize("garbage", ["", "abc", "a.b.c", "Bearer"])
def test_malformed_tokens_are_rejected(garbage):
    with pytest.raises(InvalidToken):
        TokenService("secret").verify(garbage)


def test_rotated_secret_still_verifies_older_tokens():
    old_token = TokenService("old-secret").issue(CLAIMS)
    rotated = TokenService("new-secret", previous_secrets=["old-secret"])

    assert rotated.verify(old_token)["email"] == "ann@x.com"
    # new tokens are signed with the current secret only
    with pytest.raises(InvalidToken):
        TokenService("old-secret").verify(rotated.issue(CLAIMS))


def test_dropping_a_retired_secret_invalidates_its_tokens():
    old_token = TokenService("old-secret").issue(CLAIMS)
    with pytest.raises(InvalidToken):
        TokenService("new-secret").verify(old_token)


def test_secret_is_required():
    with pytest.raises(ValueError):
        TokenService("")
