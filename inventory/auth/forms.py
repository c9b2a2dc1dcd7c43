import re
from typing import TypeVar

import pydantic
from pydantic import BaseModel, field_validator

from inventory.auth.errors import ValidationError
from inventory.auth.passwords import MAX_PASSWORD_BYTES

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
MAX_NAME_LENGTH = 120

FormT = TypeVar('FormT', bound=BaseModel)


def _normalize_email(value: str) -> str:
    normalized = value.strip().lower()
    if not normalized:
        raise ValueError('Email is required.')
    if not EMAIL_PATTERN.match(normalized):
        raise ValueError('Email is not a valid address.')
    return normalized


def _check_password(value: str) -> str:
    if not value or not value.strip():
        raise ValueError('Password is required.')
    if len(value.encode('utf-8')) > MAX_PASSWORD_BYTES:
        raise ValueError(f'Password must be {MAX_PASSWORD_BYTES} bytes or fewer.')
    return value


class SignInForm(BaseModel):
    email: str
    password: str
    redirect_url: str | None = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _normalize_email(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        return _check_password(value)

    @field_validator('redirect_url')
    @classmethod
    def validate_redirect_url(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        # Only same-site paths; "//host" would leave the application.
        if not normalized.startswith('/') or normalized.startswith('//'):
            raise ValueError('Redirect URL must be a local path.')

        return normalized


class AdminSignUpForm(BaseModel):
    name: str
    email: str
    password: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name is required.')
        if len(normalized) > MAX_NAME_LENGTH:
            raise ValueError(f'Name must be {MAX_NAME_LENGTH} characters or fewer.')
        return normalized

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _normalize_email(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        return _check_password(value)


def bind(form_class: type[FormT], data: dict) -> FormT:
    """Validate submitted data, raising our ValidationError with per-field messages."""
    try:
        return form_class(**data)
    except pydantic.ValidationError as exc:
        errors: dict[str, list[str]] = {}
        for error in exc.errors():
            field = str(error['loc'][0]) if error['loc'] else '__all__'
            message = error['msg'].removeprefix('Value error, ')
            errors.setdefault(field, []).append(message)

        values = {key: value for key, value in data.items() if key != 'password'}
        raise ValidationError(errors, values) from exc
