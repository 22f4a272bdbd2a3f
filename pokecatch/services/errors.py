# pokecatch/services/errors.py
"""
Domain errors raised by the service layer.

Services never build HTTP responses; the routers translate these into
HTTPExceptions so the status codes live next to the endpoints.
"""


class PokecatchError(Exception):
    """Base class for every error the services raise on purpose."""

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


# ---------------- ACCOUNTS ----------------

class EmailTaken(PokecatchError):
    """Email already exists"""


class AccountNotFound(PokecatchError):
    """User not found"""


class BadCredentials(PokecatchError):
    """Unauthorized"""


# ---------------- TOKENS ----------------

class TokenError(PokecatchError):
    """Invalid or expired token"""


class TokenInvalid(TokenError):
    """Invalid token"""


class TokenExpired(TokenError):
    """Token expired"""


# ---------------- CATALOG ----------------

class CatalogEntryExists(PokecatchError):
    """Pokemon already exists"""


class CatalogEntryNotFound(PokecatchError):
    """Pokemon not found"""


class CatalogEntryInUse(PokecatchError):
    """Pokemon is still referenced by caught records"""


class CatalogLookupFailed(PokecatchError):
    """Pokemon not found"""


# ---------------- COLLECTION ----------------

class NotFoundOrNotOwned(PokecatchError):
    """Caught pokemon not found"""


class UnknownSubject(PokecatchError):
    """User not found"""
