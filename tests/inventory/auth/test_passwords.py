import pytest

from inventory.auth.passwords import MAX_PASSWORD_BYTES, PasswordHasher


@pytest.fixture()
def hasher() -> PasswordHasher:
    return PasswordHasher(cost=4)


@pytest.mark.parametrize('password', ['Secr3t!', 'correct horse battery staple', 'pässwörd', 'x', '~!@#$%^&*()_+'])
def test_verify_accepts_the_hashed_password(hasher: PasswordHasher, password: str) -> None:
    assert hasher.verify(password, hasher.hash(password))


def test_verify_rejects_a_different_password(hasher: PasswordHasher) -> None:
    hashed = hasher.hash('Secr3t!')

    assert not hasher.verify('secr3t!', hashed)
    assert not hasher.verify('Secr3t', hashed)
    assert not hasher.verify('Secr3t!!', hashed)


def test_hash_is_self_describing_and_salted(hasher: PasswordHasher) -> None:
    first = hasher.hash('Secr3t!')
    second = hasher.hash('Secr3t!')

    assert first.startswith('$2b$04$')
    assert first != second


def test_hash_uses_configured_cost() -> None:
    assert PasswordHasher(cost=5).hash('Secr3t!').startswith('$2b$05$')


def test_default_cost_is_thirteen() -> None:
    assert PasswordHasher().cost == 13


@pytest.mark.parametrize('stored', ['', 'not-a-hash', '$2b$04$tooshort', 'plaintext-password'])
def test_verify_fails_closed_on_malformed_hash(hasher: PasswordHasher, stored: str) -> None:
    assert hasher.verify('Secr3t!', stored) is False


def test_verify_rejects_empty_password(hasher: PasswordHasher) -> None:
    assert hasher.verify('', hasher.hash('Secr3t!')) is False


def test_hash_refuses_passwords_bcrypt_would_truncate(hasher: PasswordHasher) -> None:
    with pytest.raises(ValueError):
        hasher.hash('a' * (MAX_PASSWORD_BYTES + 1))


def test_verify_rejects_overlong_password_sharing_a_prefix(hasher: PasswordHasher) -> None:
    password = 'a' * MAX_PASSWORD_BYTES
    hashed = hasher.hash(password)

    assert hasher.verify(password, hashed)
    assert not hasher.verify(password + 'b', hashed)
