import logging
from abc import ABC, abstractmethod

import httpx
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from workdesk.config import Settings
from workdesk.core.exceptions import AuthenticationError, WorkdeskError
from workdesk.core.security import verify_password
from workdesk.models.external_identity import ExternalIdentity
from workdesk.models.user import Role, User

logger = logging.getLogger(__name__)


class AuthStrategy(ABC):
    """Strategy Pattern: decide who a set of credentials belongs to."""

    @abstractmethod
    def authenticate(self, email: str, password: str, db: Session) -> User:
        raise NotImplementedError


class LocalPasswordStrategy(AuthStrategy):
    """Checks the bcrypt hash stored on the user row."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def authenticate(self, email: str, password: str, db: Session) -> User:
        user = db.query(User).filter(User.email == email).first()
        if not user or not verify_password(password, user.password_hash, self.settings):
            raise AuthenticationError("Invalid credentials")
        return user


class KeycloakStrategy(AuthStrategy):
    """Delegates the password check to a Keycloak realm and links the subject to a local user."""

    provider = "keycloak"

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None):
        self.settings = settings
        self._transport = transport

    @property
    def token_url(self) -> str:
        base = (self.settings.KEYCLOAK_BASE_URL or "").rstrip("/")
        return f"{base}/realms/{self.settings.KEYCLOAK_REALM}/protocol/openid-connect/token"

    def _request_token(self, email: str, password: str) -> str:
        if not (self.settings.KEYCLOAK_BASE_URL and self.settings.KEYCLOAK_REALM and self.settings.KEYCLOAK_AUDIENCE):
            raise WorkdeskError("Keycloak is not configured")

        form = {
            "grant_type": "password",
            "client_id": self.settings.KEYCLOAK_AUDIENCE,
            "client_secret": self.settings.KEYCLOAK_AUDIENCE_SECRET or "",
            "username": email,
            "password": password,
        }
        try:
            with httpx.Client(transport=self._transport, timeout=self.settings.KEYCLOAK_TIMEOUT_SECONDS) as client:
                response = client.post(self.token_url, data=form)
        except httpx.HTTPError as exc:
            logger.error("Keycloak token request failed: %s", exc)
            raise WorkdeskError("Identity provider unavailable") from exc

        if response.status_code != 200:
            logger.info("Keycloak rejected credentials for %s (HTTP %s)", email, response.status_code)
            raise AuthenticationError("Invalid credentials (Keycloak)")

        access_token = response.json().get("access_token")
        if not access_token:
            raise AuthenticationError("Invalid credentials (Keycloak)")
        return access_token

    def authenticate(self, email: str, password: str, db: Session) -> User:
        access_token = self._request_token(email, password)
        try:
            claims = jwt.get_unverified_claims(access_token)
        except JWTError as exc:
            raise AuthenticationError("Invalid token from identity provider") from exc

        subject = claims.get("sub")
        if not subject:
            raise AuthenticationError("Invalid token from identity provider")

        realm_roles = (claims.get("realm_access") or {}).get("roles") or []
        role = Role.MANAGER if Role.MANAGER.value in realm_roles else Role.OPERATOR

        user = db.query(User).filter(User.email == email).first()
        if not user:
            user = User(email=email, password_hash="", role=role.value, enabled=True)
            db.add(user)
            db.flush()
            logger.info("Provisioned local user %s from %s", user.id, self.provider)

        identity = db.query(ExternalIdentity).filter(ExternalIdentity.email == email).first()
        if identity:
            identity.subject = subject
        else:
            db.add(ExternalIdentity(
                provider=self.provider,
                subject=subject,
                email=email,
                user_id=user.id,
            ))
        db.commit()
        db.refresh(user)
        return user


def get_auth_strategy(settings: Settings) -> AuthStrategy:
    name = (settings.AUTH_STRATEGY or "local").strip().lower()
    if name == "local":
        return LocalPasswordStrategy(settings)
    if name == "keycloak":
        return KeycloakStrategy(settings)
    raise ValueError(f"Unknown AUTH_STRATEGY: {settings.AUTH_STRATEGY}")
