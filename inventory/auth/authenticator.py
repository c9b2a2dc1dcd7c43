import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inventory.auth import jwt_handler
from inventory.auth.errors import BadCredentials, PersistenceError
from inventory.auth.forms import SignInForm, bind
from inventory.auth.jwt_handler import SessionClaims
from inventory.auth.passwords import PasswordHasher
from inventory.core import config
from inventory.database import InventoryDB
from inventory.models.locked_user import LockedUser
from inventory.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredCredentials:
    claims: SessionClaims
    password_hash: str
    is_locked: bool


@dataclass(frozen=True)
class SignInResult:
    claims: SessionClaims
    session_token: str
    redirect_url: str
    expires_minutes: int


def _find_credentials(session: Session, email: str) -> StoredCredentials | None:
    row = (
        session.query(User, LockedUser.user_id)
        .outerjoin(LockedUser, User.id == LockedUser.user_id)
        .filter(User.email == email)
        .first()
    )
    if row is None:
        return None

    user, locked_user_id = row
    return StoredCredentials(
        claims=SessionClaims(
            user_id=user.id,
            email=user.email,
            name=user.name,
            is_administrator=bool(user.is_administrator),
        ),
        password_hash=user.password,
        is_locked=locked_user_id is not None,
    )


class CredentialAuthenticator:
    """Verifies email/password pairs and issues signed session tokens.

    Holds no mutable state; any number of threads may call ``sign_in`` at once.
    """

    def __init__(
        self,
        db: InventoryDB,
        hasher: PasswordHasher,
        default_redirect_url: str = config.DEFAULT_LANDING_URL,
        session_expires_minutes: int | None = None,
    ):
        self.db = db
        self.hasher = hasher
        self.default_redirect_url = default_redirect_url
        self.session_expires_minutes = session_expires_minutes or config.JWT_EXPIRES_MINUTES
        # Verified against when the email is unknown so both failures cost the same.
        self._dummy_hash = hasher.hash('inventory-dummy-password')

    def sign_in(self, email: str, password: str, redirect_url: str | None = None) -> SignInResult:
        form = bind(SignInForm, {'email': email, 'password': password, 'redirect_url': redirect_url})

        try:
            stored = self.db.query(lambda session: _find_credentials(session, form.email)).result()
        except SQLAlchemyError as exc:
            logger.exception('Credential lookup failed.')
            raise PersistenceError() from exc

        if stored is None:
            self.hasher.verify(form.password, self._dummy_hash)
            raise BadCredentials()

        if not self.hasher.verify(form.password, stored.password_hash) or stored.is_locked:
            raise BadCredentials()

        token = jwt_handler.create_session_token(stored.claims, expires_minutes=self.session_expires_minutes)
        logger.info('User %s signed in.', stored.claims.user_id)
        return SignInResult(
            claims=stored.claims,
            session_token=token,
            redirect_url=form.redirect_url or self.default_redirect_url,
            expires_minutes=self.session_expires_minutes,
        )
