"""
Identity delegation: resolve a bearer token to the user it belongs to.

Tokens are issued by the managed auth service. With a JWT secret configured
they are verified locally; otherwise the auth API is asked for the user.
"""
import logging
import uuid
from dataclasses import dataclass, field

import httpx
from jose import ExpiredSignatureError, JWTError, jwt

from bizense.config import Settings
from bizense.core.errors import IdentityError, IdentityUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class AuthUser:
    id: uuid.UUID
    email: str | None = None
    role: str | None = None
    metadata: dict = field(default_factory=dict)


def _service_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or "Invalid token"
    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return "Invalid token"


def _user_from_claims(sub, email, role, metadata) -> AuthUser:
    try:
        user_id = uuid.UUID(str(sub))
    except (TypeError, ValueError) as e:
        raise IdentityError("Token subject is not a valid user id") from e
    return AuthUser(id=user_id, email=email, role=role, metadata=metadata or {})


class IdentityClient:
    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = (settings.SUPABASE_URL or "").rstrip("/")
        self.api_key = settings.SUPABASE_ANON_KEY
        self.jwt_secret = settings.SUPABASE_JWT_SECRET
        self.audience = settings.SUPABASE_JWT_AUDIENCE
        self.timeout = settings.IDENTITY_TIMEOUT_SECONDS
        self._transport = transport

    async def get_user(self, token: str) -> AuthUser:
        if self.jwt_secret:
            return self._decode(token)
        return await self._fetch_user(token)

    def _decode(self, token: str) -> AuthUser:
        try:
            payload = jwt.decode(token, self.jwt_secret, algorithms=["HS256"], audience=self.audience)
        except ExpiredSignatureError as e:
            raise IdentityError("Token has expired") from e
        except JWTError as e:
            raise IdentityError("Invalid or expired token") from e
        if not payload.get("sub"):
            raise IdentityError("Token payload missing subject")
        return _user_from_claims(
            payload["sub"],
            payload.get("email"),
            payload.get("role"),
            payload.get("user_metadata"),
        )

    async def _fetch_user(self, token: str) -> AuthUser:
        if not self.base_url:
            raise IdentityUnavailableError("Identity service is not configured")
        headers = {"Authorization": f"Bearer {token}"}
        if self.api_key:
            headers["apikey"] = self.api_key
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(f"{self.base_url}/auth/v1/user", headers=headers)
        except httpx.HTTPError as e:
            logger.error("Identity service request failed: %s", e)
            raise IdentityUnavailableError(str(e)) from e
        if response.status_code >= 500:
            raise IdentityUnavailableError(_service_message(response))
        if response.status_code >= 400:
            raise IdentityError(_service_message(response))
        body = response.json()
        return _user_from_claims(body.get("id"), body.get("email"), body.get("role"), body.get("user_metadata"))
