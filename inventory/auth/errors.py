"""Errors raised by the authentication core.

Raw persistence exceptions never leave the services; they are translated into
one of the kinds below.
"""

BAD_CREDENTIALS_MESSAGE = "auth.signin.error.badcredentials"
DUPLICATE_EMAIL_MESSAGE = "auth.signup.error.duplicateemail"
PERSISTENCE_MESSAGE = "error.persistence"


class AuthError(Exception):
    """Base class for every error of the authentication core."""


class ValidationError(AuthError):
    """Submitted form is malformed. Carries field errors and the values to re-present."""

    def __init__(self, errors: dict[str, list[str]], values: dict | None = None):
        super().__init__("Invalid form submission.")
        self.errors = errors
        self.values = values or {}


class BadCredentials(AuthError):
    """Unknown email or wrong password. Both cases share this exact error."""

    def __init__(self):
        super().__init__(BAD_CREDENTIALS_MESSAGE)
        self.message = BAD_CREDENTIALS_MESSAGE


class DuplicateEmail(AuthError):
    def __init__(self, email: str):
        super().__init__(DUPLICATE_EMAIL_MESSAGE)
        self.email = email
        self.message = DUPLICATE_EMAIL_MESSAGE


class PersistenceError(AuthError):
    """Database failure. Generic message; the driver error is chained as the cause."""

    def __init__(self):
        super().__init__(PERSISTENCE_MESSAGE)
        self.message = PERSISTENCE_MESSAGE


class NotInitialized(AuthError):
    """The schema version row is missing."""

    def __init__(self):
        super().__init__("Database schema has not been initialized.")
