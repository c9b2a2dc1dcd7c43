from pathlib import Path

import pytest
from sqlalchemy.orm import Session

from inventory.auth.passwords import PasswordHasher
from inventory.database import InventoryDB, create_db_engine
from inventory.models.administrator import Administrator
from inventory.models.locked_user import LockedUser
from inventory.models.schema_version import SchemaVersion
from inventory.models.user import User

# Lowest cost bcrypt accepts; keeps the suite fast.
TEST_BCRYPT_COST = 4


class Seeder:
    """Writes fixture rows straight through the database executor."""

    def __init__(self, db: InventoryDB, hasher: PasswordHasher):
        self.db = db
        self.hasher = hasher

    def schema_version(self, version: str) -> None:
        def write(session: Session) -> None:
            session.query(SchemaVersion).delete()
            session.add(SchemaVersion(database_version=version))

        self.db.transaction(write).result()

    def user(
        self,
        email: str,
        password: str = 'Secr3t!',
        name: str = 'Someone',
        administrator: bool = False,
        locked: bool = False,
    ) -> int:
        def write(session: Session) -> int:
            user = User(name=name, email=email, password=self.hasher.hash(password), is_administrator=administrator)
            session.add(user)
            session.flush()
            if administrator:
                session.add(Administrator(user_id=user.id))
            if locked:
                session.add(LockedUser(user_id=user.id))
            return user.id

        return self.db.transaction(write).result()

    def lock(self, user_id: int) -> None:
        self.db.transaction(lambda session: session.add(LockedUser(user_id=user_id))).result()

    def count(self, model) -> int:
        return self.db.query(lambda session: session.query(model).count()).result()


@pytest.fixture()
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'inventory.db'}"


@pytest.fixture()
def db(database_url: str):
    database = InventoryDB(create_db_engine(database_url), max_workers=4)
    database.create_schema()
    yield database
    database.shutdown()


@pytest.fixture()
def hasher() -> PasswordHasher:
    return PasswordHasher(cost=TEST_BCRYPT_COST)


@pytest.fixture()
def seed(db: InventoryDB, hasher: PasswordHasher) -> Seeder:
    return Seeder(db, hasher)
