import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from inventory.auth import signup
from inventory.auth.authenticator import CredentialAuthenticator
from inventory.auth.errors import DuplicateEmail, PersistenceError, ValidationError
from inventory.auth.passwords import PasswordHasher
from inventory.auth.signup import SignUpService
from inventory.models.administrator import Administrator
from inventory.models.user import User


@pytest.fixture()
def service(db, hasher) -> SignUpService:
    return SignUpService(db, hasher, sign_in_url='/auth/sign-in')


def orphan_administrators(db) -> int:
    def count(session: Session) -> int:
        return (
            session.query(Administrator)
            .outerjoin(User, Administrator.user_id == User.id)
            .filter(User.id.is_(None))
            .count()
        )

    return db.query(count).result()


def test_sign_up_creates_user_and_administrator(service, db, seed) -> None:
    result = service.sign_up_administrator('Alice', 'alice@example.com', 'Secr3t!')

    user = db.query(lambda session: session.get(User, result.user_id)).result()
    assert user.name == 'Alice'
    assert user.email == 'alice@example.com'
    assert user.is_administrator is True
    assert user.password != 'Secr3t!'
    assert seed.count(Administrator) == 1
    assert result.redirect_url == '/auth/sign-in'


def test_signed_up_administrator_can_sign_in(service, db, hasher) -> None:
    result = service.sign_up_administrator('Alice', 'alice@example.com', 'Secr3t!')

    session = CredentialAuthenticator(db, hasher).sign_in('alice@example.com', 'Secr3t!')

    assert session.claims.user_id == result.user_id


def test_duplicate_email_is_rejected_without_new_rows(service, seed) -> None:
    service.sign_up_administrator('Alice', 'alice@example.com', 'Secr3t!')

    with pytest.raises(DuplicateEmail) as exception_info:
        service.sign_up_administrator('Alice Again', 'ALICE@example.com', 'Other1!')

    assert exception_info.value.email == 'alice@example.com'
    assert seed.count(User) == 1
    assert seed.count(Administrator) == 1


def test_invalid_form_has_no_side_effects(service, seed) -> None:
    with pytest.raises(ValidationError) as exception_info:
        service.sign_up_administrator('', 'alice', 'Secr3t!')

    assert set(exception_info.value.errors) == {'name', 'email'}
    assert exception_info.value.values == {'name': '', 'email': 'alice'}
    assert seed.count(User) == 0


def test_administrator_insert_failure_leaves_no_user(db, hasher, seed, monkeypatch) -> None:
    def failing_administrator(**kwargs):
        raise OperationalError('INSERT INTO administrator', {}, Exception('disk I/O error'))

    monkeypatch.setattr(signup, 'Administrator', failing_administrator)

    with pytest.raises(PersistenceError):
        SignUpService(db, hasher).sign_up_administrator('Alice', 'alice@example.com', 'Secr3t!')

    assert seed.count(User) == 0
    assert seed.count(Administrator) == 0


def test_concurrent_sign_ups_with_same_email_have_one_winner(service, seed, db) -> None:
    attempts = 4
    barrier = threading.Barrier(attempts)

    def attempt(index: int):
        barrier.wait()
        try:
            return service.sign_up_administrator(f'Alice {index}', 'alice@example.com', 'Secr3t!')
        except DuplicateEmail as exc:
            return exc

    with ThreadPoolExecutor(max_workers=attempts) as executor:
        outcomes = list(executor.map(attempt, range(attempts)))

    winners = [outcome for outcome in outcomes if not isinstance(outcome, DuplicateEmail)]
    losers = [outcome for outcome in outcomes if isinstance(outcome, DuplicateEmail)]
    assert len(winners) == 1
    assert len(losers) == attempts - 1
    assert seed.count(User) == 1
    assert seed.count(Administrator) == 1
    assert orphan_administrators(db) == 0


def test_password_is_hashed_outside_the_database_workers(db, seed) -> None:
    hashing_threads = []

    class RecordingHasher(PasswordHasher):
        def hash(self, plaintext: str) -> str:
            hashing_threads.append(threading.current_thread().name)
            return super().hash(plaintext)

    SignUpService(db, RecordingHasher(cost=4)).sign_up_administrator('Alice', 'alice@example.com', 'Secr3t!')

    assert hashing_threads == [threading.current_thread().name]
    assert not hashing_threads[0].startswith('inventory-db')
    assert seed.count(Administrator) == 1
