"""Bearer-token authentication resolving an opaque token to a Principal.

Issuing sessions belongs to the external auth system; this module only
turns a presented token into ``{id, role, subscription}``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from django.core import signing
from rest_framework import authentication, exceptions

from events.conf import get_principal_provider, registration_setting
from events.domain import Principal, PrincipalId, Role

TOKEN_SALT = "events.principal"


class Unauthenticated(Exception):
    """Raised by a principal provider when a token does not identify anybody."""


class PrincipalProvider(ABC):
    @abstractmethod
    def resolve(self, token: str) -> Principal:
        """Return the principal a token belongs to.

        Raises:
            Unauthenticated: If the token is invalid or expired.
        """
        ...


class SignedTokenPrincipalProvider(PrincipalProvider):
    """Tokens signed with the project SECRET_KEY through django.core.signing."""

    def __init__(self, max_age: int | None = None) -> None:
        self._max_age = max_age or registration_setting("TOKEN_MAX_AGE_SECONDS")

    def issue(self, principal: Principal) -> str:
        return signing.dumps(
            {
                "id": principal.id.value,
                "role": principal.role.value,
                "subscription": principal.subscription,
            },
            salt=TOKEN_SALT,
        )

    def resolve(self, token: str) -> Principal:
        try:
            payload = signing.loads(token, salt=TOKEN_SALT, max_age=self._max_age)
        except signing.SignatureExpired as exc:
            raise Unauthenticated("Token has expired") from exc
        except signing.BadSignature as exc:
            raise Unauthenticated("Invalid token") from exc

        try:
            return Principal(
                id=PrincipalId(payload["id"]),
                role=Role(payload.get("role", Role.MEMBER.value)),
                subscription=payload.get("subscription"),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise Unauthenticated("Invalid token") from exc


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    """request.user for principal-authenticated requests."""

    principal: Principal

    is_authenticated = True
    is_anonymous = False


class PrincipalAuthentication(authentication.BaseAuthentication):
    """Authorization: Bearer <token>"""

    keyword = "Bearer"

    def authenticate(self, request):
        header = authentication.get_authorization_header(request).split()
        if not header or header[0].lower() != self.keyword.lower().encode():
            return None
        if len(header) != 2:
            raise exceptions.AuthenticationFailed("Invalid token header.")

        try:
            token = header[1].decode()
        except UnicodeError as exc:
            raise exceptions.AuthenticationFailed("Invalid token header.") from exc

        try:
            principal = get_principal_provider().resolve(token)
        except Unauthenticated as exc:
            raise exceptions.AuthenticationFailed(str(exc)) from exc
        return AuthenticatedPrincipal(principal=principal), token

    def authenticate_header(self, request):
        return self.keyword
