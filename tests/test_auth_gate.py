import pytest

from restaurant_api.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    MalformedAuthHeaderError,
    MissingCredentialsError,
    TokenError,
)
from restaurant_api.models import User, UserRole
from restaurant_api.services.auth import SessionClaims, authenticate_header, authorize


def claims_for(role: UserRole) -> SessionClaims:
    return SessionClaims(user_id=1, email="a@x.com", role=role, issued_at=0, expires_at=0)


@pytest.fixture()
def token(codec) -> str:
    user = User(id=1, email="a@x.com", name="A", password_hash="unused", role=UserRole.ADMIN)
    return codec.issue(user)


class TestAuthenticate:
    @pytest.mark.parametrize("header", [None, ""])
    def test_no_header(self, codec, header):
        with pytest.raises(MissingCredentialsError):
            authenticate_header(header, codec)

    @pytest.mark.parametrize(
        "header_template",
        [
            "{token}",
            "Bearer",
            "Token {token}",
            "bearer {token}",
            "BEARER {token}",
            "Bearer {token} extra",
            "Basic dXNlcjpwYXNz",
        ],
    )
    def test_malformed_header(self, codec, token, header_template):
        with pytest.raises(MalformedAuthHeaderError):
            authenticate_header(header_template.format(token=token), codec)

    def test_invalid_token(self, codec):
        with pytest.raises(TokenError):
            authenticate_header("Bearer not.a.token", codec)

    def test_valid_token(self, codec, token):
        claims = authenticate_header(f"Bearer {token}", codec)
        assert claims.user_id == 1
        assert claims.role == UserRole.ADMIN

    def test_surrounding_whitespace_is_tolerated(self, codec, token):
        claims = authenticate_header(f"  Bearer   {token} ", codec)
        assert claims.email == "a@x.com"

    def test_every_failure_is_unauthorized(self):
        for error in [MissingCredentialsError, MalformedAuthHeaderError, TokenError]:
            assert issubclass(error, AuthenticationError)
            assert error.status_code == 401
            assert error.public_detail == "Invalid or missing credentials"


class TestAuthorize:
    def test_without_authentication_is_forbidden(self):
        with pytest.raises(AuthorizationError):
            authorize(None, UserRole.ADMIN)

    def test_wrong_role_is_forbidden(self):
        with pytest.raises(AuthorizationError):
            authorize(claims_for(UserRole.CUSTOMER), UserRole.ADMIN)

    def test_matching_role_passes_claims_through(self):
        claims = claims_for(UserRole.ADMIN)
        assert authorize(claims, UserRole.ADMIN) is claims

    def test_forbidden_is_403(self):
        assert AuthorizationError.status_code == 403
