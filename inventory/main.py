import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from inventory.auth.authenticator import CredentialAuthenticator
from inventory.auth.errors import PersistenceError
from inventory.auth.passwords import PasswordHasher
from inventory.auth.signup import SignUpService
from inventory.core import config
from inventory.database import InventoryDB, create_db_engine
from inventory.maintenance import AdministratorGate, MaintenanceGate, SchemaVersionChecker
from inventory.routes import auth_routes

logger = logging.getLogger(__name__)

# Reachable while in maintenance. Admin sign-up is further restricted by its own route dependency.
MAINTENANCE_EXEMPT_PATHS = {
    '/',
    '/maintenance',
    '/auth/sign-in',
    '/auth/admin-sign-up',
    '/auth/sign-out',
}


def create_app(db: InventoryDB | None = None, hasher: PasswordHasher | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        config.validate_runtime_config()

        database = db or InventoryDB(create_db_engine())
        password_hasher = hasher or PasswordHasher()

        try:
            database.create_schema()
        except SQLAlchemyError:
            logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')

        administrator_gate = AdministratorGate(database)
        app.state.db = database
        app.state.administrator_gate = administrator_gate
        app.state.maintenance_gate = MaintenanceGate(SchemaVersionChecker(database), administrator_gate)
        app.state.authenticator = CredentialAuthenticator(database, password_hasher)
        app.state.sign_up_service = SignUpService(database, password_hasher)
        try:
            yield
        finally:
            database.shutdown()

    app = FastAPI(lifespan=lifespan)

    @app.middleware('http')
    async def maintenance_middleware(request: Request, call_next):
        if request.url.path in MAINTENANCE_EXEMPT_PATHS:
            return await call_next(request)

        try:
            in_maintenance = await run_in_threadpool(request.app.state.maintenance_gate.is_in_maintenance)
        except PersistenceError:
            in_maintenance = True

        if in_maintenance:
            return JSONResponse(status_code=503, content={'error': 'Application is in maintenance.'})
        return await call_next(request)

    @app.get('/')
    def root():
        return {'status': 'Inventory API Running'}

    @app.get('/maintenance')
    def maintenance(request: Request):
        try:
            gate_status = request.app.state.maintenance_gate.status()
        except PersistenceError as exc:
            return JSONResponse(status_code=503, content={'error': exc.message})

        return {
            'in_maintenance': gate_status.in_maintenance,
            'schema_compatible': gate_status.schema_compatible,
            'has_active_administrator': gate_status.has_active_administrator,
        }

    app.include_router(auth_routes.router, prefix='/auth')
    return app


app = create_app()
