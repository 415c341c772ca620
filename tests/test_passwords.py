from ehr_api.passwords import PasswordHasher


def test_hash_is_salted_and_verifies():
    hasher = PasswordHasher(rounds=4)
    first = hasher.hash("pw123")
    second = hasher.hash("pw123")

    assert first != "pw123"
    assert first != second
    assert hasher.verify("pw123", first)
    assert hasher.verify("pw123", second)


def test_wrong_password_is_a_plain_mismatch():
    hasher = PasswordHasher(rounds=4)
    assert hasher.verify("nope", hasher.hash("pw123")) is False


def test_unreadable_hash_never_raises():
    hasher = PasswordHasher(rounds=4)
    assert hasher.verify("pw123", "not-a-bcrypt-hash") is False
    assert hasher.verify("pw123", "") is False
    assert hasher.verify("", hasher.hash("pw123")) is False
