"""Maintenance mode: is the application usable right now?

The application is in maintenance when the database schema does not match the
running major version, or when no administrator is left who is not locked.
Nothing here is cached; every call reads the database again so that a migration
or a new administrator is picked up immediately.
"""

import logging
import re
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inventory.auth.errors import NotInitialized, PersistenceError
from inventory.core import config
from inventory.database import InventoryDB
from inventory.models.administrator import Administrator
from inventory.models.locked_user import LockedUser
from inventory.models.schema_version import SchemaVersion

logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(r'^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:[-+].*)?$')


def parse_major_version(value: str | int | None) -> int | None:
    if value is None:
        return None
    match = VERSION_PATTERN.match(str(value).strip())
    if not match:
        return None
    return int(match.group(1))


class SchemaVersionChecker:
    def __init__(self, db: InventoryDB, app_version: str = config.APP_VERSION):
        self.db = db
        self.app_version = app_version

    def current_version(self) -> str:
        """Return the stored schema version, or raise ``NotInitialized`` when there is none."""
        try:
            stored = self.db.query(_fetch_schema_version).result()
        except SQLAlchemyError as exc:
            logger.exception('Could not read the schema version.')
            raise PersistenceError() from exc

        if stored is None:
            raise NotInitialized()
        return stored

    def is_compatible(self) -> bool:
        try:
            stored = self.current_version()
        except NotInitialized:
            logger.warning('Schema version record is missing; database is not initialized.')
            return False

        database_major = parse_major_version(stored)
        application_major = parse_major_version(self.app_version)
        if database_major is None or application_major is None:
            logger.warning('Cannot compare schema version %r with application version %r.', stored, self.app_version)
            return False

        return database_major == application_major


def _fetch_schema_version(session: Session) -> str | None:
    record = session.query(SchemaVersion).first()
    return record.database_version if record is not None else None


class AdministratorGate:
    def __init__(self, db: InventoryDB):
        self.db = db

    def count_active_administrators(self) -> int:
        try:
            return self.db.query(_count_active_administrators).result()
        except SQLAlchemyError as exc:
            logger.exception('Could not count active administrators.')
            raise PersistenceError() from exc

    def has_active_administrator(self) -> bool:
        return self.count_active_administrators() > 0


def _count_active_administrators(session: Session) -> int:
    count = (
        session.query(func.count(Administrator.user_id))
        .select_from(Administrator)
        .outerjoin(LockedUser, Administrator.user_id == LockedUser.user_id)
        .filter(LockedUser.user_id.is_(None))
        .scalar()
    )
    return count or 0


@dataclass(frozen=True)
class MaintenanceStatus:
    schema_compatible: bool
    has_active_administrator: bool

    @property
    def in_maintenance(self) -> bool:
        return not self.schema_compatible or not self.has_active_administrator


class MaintenanceGate:
    def __init__(self, schema_checker: SchemaVersionChecker, administrator_gate: AdministratorGate):
        self.schema_checker = schema_checker
        self.administrator_gate = administrator_gate

    def status(self) -> MaintenanceStatus:
        return MaintenanceStatus(
            schema_compatible=self.schema_checker.is_compatible(),
            has_active_administrator=self.administrator_gate.has_active_administrator(),
        )

    def is_in_maintenance(self) -> bool:
        if not self.schema_checker.is_compatible():
            return True
        return not self.administrator_gate.has_active_administrator()
