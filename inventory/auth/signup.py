import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from inventory.auth.errors import DuplicateEmail, PersistenceError
from inventory.auth.forms import AdminSignUpForm, bind
from inventory.auth.passwords import PasswordHasher
from inventory.core import config
from inventory.database import InventoryDB
from inventory.models.administrator import Administrator
from inventory.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignUpResult:
    user_id: int
    redirect_url: str


def _is_email_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return 'uq_user_email' in message or 'user.email' in message or '(email)' in message


class SignUpService:
    def __init__(self, db: InventoryDB, hasher: PasswordHasher, sign_in_url: str = config.SIGN_IN_URL):
        self.db = db
        self.hasher = hasher
        self.sign_in_url = sign_in_url

    def sign_up_administrator(self, name: str, email: str, password: str) -> SignUpResult:
        """Create a user and its administrator role in a single transaction.

        The email uniqueness constraint decides concurrent sign-ups: the losing
        request gets ``DuplicateEmail`` and nothing it wrote is committed.
        """
        form = bind(AdminSignUpForm, {'name': name, 'email': email, 'password': password})
        # Hashed on the caller's thread so the database workers only run queries.
        password_hash = self.hasher.hash(form.password)

        def create(session: Session) -> int:
            user = User(
                name=form.name,
                email=form.email,
                password=password_hash,
                is_administrator=True,
            )
            session.add(user)
            session.flush()

            session.add(Administrator(user_id=user.id))
            session.flush()
            return user.id

        try:
            user_id = self.db.transaction(create).result()
        except IntegrityError as exc:
            if _is_email_conflict(exc):
                logger.info('Administrator sign-up rejected: email already registered.')
                raise DuplicateEmail(form.email) from exc
            logger.exception('Administrator sign-up violated a database constraint.')
            raise PersistenceError() from exc
        except SQLAlchemyError as exc:
            logger.exception('Administrator sign-up failed.')
            raise PersistenceError() from exc

        logger.info('Administrator %s created.', user_id)
        return SignUpResult(user_id=user_id, redirect_url=self.sign_in_url)

