"""OAuth sign-in with Google and Apple.

ID tokens are only trusted after their RS256 signature checks out against
the provider's published keys and their audience and issuer match this
app. Google access tokens are checked at the tokeninfo endpoint before the
userinfo lookup.
"""

import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime

import httpx
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.orm import Session

from vegan_aisle.config import get_settings
from vegan_aisle.errors import AuthenticationError, BadRequestError, ConflictError
from vegan_aisle.models.enums import AuthProvider
from vegan_aisle.models.user import User
from vegan_aisle.services.auth import create_access_token

logger = logging.getLogger(__name__)

GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"
GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"
GOOGLE_JWKS_URL = "https://www.googleapis.com/oauth2/v3/certs"
GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")

APPLE_JWKS_URL = "https://appleid.apple.com/auth/keys"
APPLE_ISSUER = "https://appleid.apple.com"

JWKS_CACHE_SECONDS = 3600

_jwks_cache: dict[str, tuple[float, dict]] = {}


@dataclass
class OAuthUserData:
    """Identity claims returned by a provider."""

    email: str
    provider_id: str
    display_name: str
    name: str | None = None
    profile_picture: str | None = None


@dataclass
class OAuthResult:
    """Outcome of an OAuth sign-in."""

    user: User
    token: str
    is_new_user: bool


def _is_jwt(token: str) -> bool:
    return len(token.split(".")) == 3


def _client_id(value: str | None, provider: str) -> str:
    if not value:
        logger.error(f"{provider} sign-in attempted without a configured client id")
        raise AuthenticationError(f"{provider} sign-in is not configured")
    return value


async def fetch_jwks(url: str) -> dict:
    """The provider's published signing keys, cached for an hour."""
    cached = _jwks_cache.get(url)
    if cached and time.monotonic() - cached[0] < JWKS_CACHE_SECONDS:
        return cached[1]

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Fetching signing keys from {url} failed: {e}")
        raise BadRequestError("Could not verify sign-in token") from e

    jwks = response.json()
    _jwks_cache[url] = (time.monotonic(), jwks)
    return jwks


async def _verified_claims(
    token: str, jwks_url: str, audience: str, issuer: str | tuple[str, ...], provider: str
) -> dict:
    """Decode a provider ID token, checking signature, audience, issuer and expiry."""
    try:
        header = jwt.get_unverified_header(token)
    except JWTError as e:
        raise BadRequestError("Invalid token format") from e

    jwks = await fetch_jwks(jwks_url)
    keys = [k for k in jwks.get("keys", []) if k.get("kid") == header.get("kid")]
    if not keys:
        logger.warning(f"{provider} token signed with unknown key id {header.get('kid')!r}")
        raise AuthenticationError(f"Invalid {provider} token")

    try:
        return jwt.decode(
            token,
            {"keys": keys},
            algorithms=["RS256"],
            audience=audience,
            issuer=issuer,
            options={
                "verify_at_hash": False,
                "require_aud": True,
                "require_iss": True,
                "require_exp": True,
                "require_sub": True,
            },
        )
    except ExpiredSignatureError as e:
        raise AuthenticationError(f"{provider} token has expired") from e
    except JWTError as e:
        logger.warning(f"Rejected {provider} token: {e}")
        raise AuthenticationError(f"Invalid {provider} token") from e


def _email_unverified(info: dict) -> bool:
    # tokeninfo and userinfo send "true"/"false" strings
    return str(info.get("email_verified", True)).lower() == "false"


async def _google_access_token_info(token: str, client_id: str) -> dict:
    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            token_info = await client.get(GOOGLE_TOKENINFO_URL, params={"access_token": token})
            if token_info.status_code != 200:
                raise AuthenticationError("Invalid Google access token")
            audiences = {token_info.json().get("aud"), token_info.json().get("azp")}
            if client_id not in audiences:
                logger.warning("Google access token was issued to another client")
                raise AuthenticationError("Invalid Google access token")
            response = await client.get(GOOGLE_USERINFO_URL, params={"access_token": token})
    except httpx.HTTPError as e:
        logger.error(f"Google token lookup failed: {e}")
        raise BadRequestError("Failed to verify Google token") from e

    if response.status_code != 200:
        raise AuthenticationError("Invalid Google access token")
    return response.json()


async def verify_google_token(token: str) -> OAuthUserData:
    """Extract identity from a Google ID token or access token.

    ID tokens (JWTs from One Tap) are verified against Google's signing
    keys; access tokens must have been issued to our client id before the
    userinfo endpoint is asked who they belong to.
    """
    client_id = _client_id(get_settings().google_client_id, "Google")

    if _is_jwt(token):
        info = await _verified_claims(token, GOOGLE_JWKS_URL, client_id, GOOGLE_ISSUERS, "Google")
        if not info.get("email"):
            raise BadRequestError("No email in Google token")
    else:
        info = await _google_access_token_info(token, client_id)
        if not info.get("email"):
            raise BadRequestError("No email in Google response")

    if _email_unverified(info):
        raise AuthenticationError("Google email address is not verified")

    email = info["email"]
    return OAuthUserData(
        email=email,
        provider_id=info.get("sub") or "",
        name=info.get("name"),
        display_name=info.get("name") or email.split("@")[0],
        profile_picture=info.get("picture"),
    )


async def verify_apple_token(identity_token: str, name: str | None = None) -> OAuthUserData:
    """Extract identity from an Apple identity token.

    Apple only sends the user's name on the first sign-in, in the request
    body. The email is taken from the signed token and nowhere else.
    """
    if not _is_jwt(identity_token):
        raise BadRequestError("Invalid Apple token format")
    client_id = _client_id(get_settings().apple_client_id, "Apple")

    claims = await _verified_claims(identity_token, APPLE_JWKS_URL, client_id, APPLE_ISSUER, "Apple")
    email = claims.get("email")
    if not email:
        raise BadRequestError("No email available from Apple sign-in")

    return OAuthUserData(
        email=email,
        provider_id=claims["sub"],
        name=name,
        display_name=name or email.split("@")[0],
    )


def authenticate_oauth(db: Session, provider: AuthProvider, data: OAuthUserData) -> OAuthResult:
    """Log in, link or register a user from provider claims.

    1. A user with this (provider, provider_id) logs straight in.
    2. A local account with the same email is linked to the provider.
    3. An account with the same email on another provider is refused.
    4. Otherwise a new user is created.
    """
    if not data.email:
        raise BadRequestError("Email is required from OAuth provider")

    now = datetime.now(UTC)
    is_new_user = False

    user = (
        db.query(User)
        .filter(User.auth_provider == provider.value, User.provider_id == data.provider_id)
        .first()
    )

    if user:
        user.last_login = now
        if data.profile_picture:
            user.profile_picture = data.profile_picture
        if data.name:
            user.name = data.name
    else:
        email = data.email.lower()
        existing = db.query(User).filter(User.email == email).first()
        if existing and existing.auth_provider == AuthProvider.LOCAL.value:
            existing.auth_provider = provider.value
            existing.provider_id = data.provider_id
            if data.profile_picture:
                existing.profile_picture = data.profile_picture
            existing.last_login = now
            user = existing
            logger.info(f"Linked user {user.id} to {provider.value} sign-in")
        elif existing:
            raise ConflictError(
                f"This email is already registered with {existing.auth_provider}. "
                "Please sign in using that method."
            )
        else:
            user = User(
                email=email,
                name=data.name,
                display_name=data.display_name or data.name or email.split("@")[0],
                auth_provider=provider.value,
                provider_id=data.provider_id,
                profile_picture=data.profile_picture,
                role="user",
                last_login=now,
            )
            db.add(user)
            is_new_user = True

    db.commit()
    db.refresh(user)
    if is_new_user:
        logger.info(f"Registered user {user.id} via {provider.value}")

    return OAuthResult(user=user, token=create_access_token(user), is_new_user=is_new_user)
