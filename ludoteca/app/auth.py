import logging
from dataclasses import dataclass
from typing import Optional

from ludoteca.app.errors import NetworkError, ValidationError, translate_backend_error
from ludoteca.app.utils.api import ApiClient, api as default_api

logger = logging.getLogger(__name__)


@dataclass
class AuthUser:
    user_id: str
    email: str
    email_confirmed: bool
    role: str = "user"
    name: str = ""


def _role(user: dict) -> str:
    for source in (user, user.get("app_metadata") or {}, user.get("user_metadata") or {}):
        role = source.get("role")
        if role in ("admin", "user"):
            return role
    return "user"


class AuthClient:
    """Credential service used by the console; the provider behind it is opaque."""

    def __init__(self, client: ApiClient | None = None):
        self.api = client or default_api
        self.user: Optional[AuthUser] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.role == "admin"

    async def sign_in(self, email: str, password: str) -> AuthUser:
        if not email or not password:
            raise ValidationError("errors:fill_required", "email and password required")

        data = await self.api.post("/api/auth/login", json={"email": email, "password": password}) or {}
        if data.get("error"):
            logger.error(f"Login error for {email}: {data['error']}")
            raise NetworkError(
                translate_backend_error(data["error"], default="errors:invalid_credentials"),
                message=str(data["error"]),
            )

        raw = data.get("user") or {}
        user = AuthUser(
            user_id=str(raw.get("id", "")),
            email=raw.get("email") or email,
            email_confirmed=bool(raw.get("email_confirmed_at")),
            role=_role(raw),
            name=(raw.get("user_metadata") or {}).get("name", ""),
        )
        if not user.email_confirmed:
            logger.info(f"Login refused, email not confirmed: {email}")
            raise ValidationError("errors:email_not_confirmed")

        token = (data.get("session") or {}).get("access_token") or data.get("accessToken")
        if token:
            self.api.set_token(token)

        self.user = user
        logger.info(f"Signed in: {user.email} role={user.role}")
        return user

    async def sign_up(self, email: str, password: str, profile: Optional[dict] = None) -> str:
        """Register; returns the new user id. The email has to be confirmed before sign-in."""
        if not email or not password:
            raise ValidationError("errors:fill_required", "email and password required")

        payload = {"email": email, "password": password, **(profile or {})}
        data = await self.api.post("/api/auth/register", json=payload) or {}
        if data.get("error"):
            logger.error(f"Register error for {email}: {data['error']}")
            raise NetworkError(translate_backend_error(data["error"]), message=str(data["error"]))

        user_id = (data.get("user") or {}).get("id") or data.get("userId") or ""
        logger.info(f"Registered: {email} id={user_id}")
        return str(user_id)

    async def sign_out(self) -> None:
        """Local sign-out always happens, even if the server call fails."""
        try:
            await self.api.post("/api/auth/logout")
        except NetworkError as e:
            logger.warning(f"Logout request failed: {e}")
        finally:
            self.api.set_token(None)
            self.user = None
