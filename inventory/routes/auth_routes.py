from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from inventory.auth.authenticator import CredentialAuthenticator
from inventory.auth.dependencies import cookie_settings, get_current_session, get_optional_session
from inventory.auth.errors import BadCredentials, DuplicateEmail, PersistenceError, ValidationError
from inventory.auth.jwt_handler import SessionClaims
from inventory.auth.signup import SignUpService
from inventory.core import config
from inventory.maintenance import AdministratorGate

router = APIRouter(tags=['auth'])


def get_authenticator(request: Request) -> CredentialAuthenticator:
    return request.app.state.authenticator


def get_sign_up_service(request: Request) -> SignUpService:
    return request.app.state.sign_up_service


def get_administrator_gate(request: Request) -> AdministratorGate:
    return request.app.state.administrator_gate


def ensure_sign_up_allowed(
    claims: SessionClaims | None = Depends(get_optional_session),
    gate: AdministratorGate = Depends(get_administrator_gate),
) -> None:
    """Open while no active administrator exists; afterwards only administrators may add one."""
    try:
        has_active_administrator = gate.has_active_administrator()
    except PersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=PersistenceError().message,
        ) from exc

    if has_active_administrator and (claims is None or not claims.is_administrator):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='Only administrators can create administrators.',
        )


def form_error_response(errors: dict[str, list[str]], values: dict) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'errors': errors, 'values': values},
    )


def persistence_error_response() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'error': PersistenceError().message},
    )


@router.post('/sign-in')
def sign_in(
    email: str = Form(''),
    password: str = Form(''),
    redirect_url: str | None = Form(None),
    authenticator: CredentialAuthenticator = Depends(get_authenticator),
):
    try:
        result = authenticator.sign_in(email, password, redirect_url)
    except ValidationError as exc:
        return form_error_response(exc.errors, exc.values)
    except BadCredentials as exc:
        return form_error_response(
            {'__all__': [exc.message]},
            {'email': email, 'redirect_url': redirect_url},
        )
    except PersistenceError:
        return persistence_error_response()

    response = RedirectResponse(url=result.redirect_url, status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        config.SESSION_COOKIE_NAME,
        result.session_token,
        max_age=result.expires_minutes * 60,
        **cookie_settings(),
    )
    return response


@router.post('/admin-sign-up')
def admin_sign_up(
    name: str = Form(''),
    email: str = Form(''),
    password: str = Form(''),
    service: SignUpService = Depends(get_sign_up_service),
    _: None = Depends(ensure_sign_up_allowed),
):
    try:
        result = service.sign_up_administrator(name, email, password)
    except ValidationError as exc:
        return form_error_response(exc.errors, exc.values)
    except DuplicateEmail as exc:
        return form_error_response({'email': [exc.message]}, {'name': name, 'email': email})
    except PersistenceError:
        return persistence_error_response()

    return RedirectResponse(url=result.redirect_url, status_code=status.HTTP_303_SEE_OTHER)


@router.post('/sign-out')
def sign_out():
    response = RedirectResponse(url=config.SIGN_IN_URL, status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(config.SESSION_COOKIE_NAME)
    return response


@router.get('/me')
def me(claims: SessionClaims = Depends(get_current_session)):
    return {
        'id': claims.user_id,
        'email': claims.email,
        'name': claims.name,
        'is_administrator': claims.is_administrator,
    }
