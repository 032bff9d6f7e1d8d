# backend/docrepo/services/auth.py
import enum
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

import jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session as DbSession

from ..config import settings
from ..errors import AuthError, NotFound, PermissionDenied, ValidationFailed
from ..models import Profile, Role
from ..schemas.auth import Session, User, UserCreate, UserMetadataUpdate
from ..utils.logging import auth_logger

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class AuthEvent(str, enum.Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"


AuthListener = Callable[[AuthEvent, Optional[Session]], None]


class Subscription:
    def __init__(self, listeners: List[AuthListener], callback: AuthListener):
        self._listeners = listeners
        self.callback = callback

    def unsubscribe(self) -> None:
        if self.callback in self._listeners:
            self._listeners.remove(self.callback)


class TokenRevocations:
    """Token ids signed out before their expiry"""

    def __init__(self):
        self._revoked: Dict[str, datetime] = {}
        self._lock = threading.Lock()

    def revoke(self, jti: str, expires_at: datetime) -> None:
        now = datetime.now(timezone.utc)
        with self._lock:
            self._revoked = {key: exp for key, exp in self._revoked.items() if exp > now}
            self._revoked[jti] = expires_at

    def is_revoked(self, jti: str) -> bool:
        with self._lock:
            return jti in self._revoked


revocations = TokenRevocations()


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


class AuthClient:
    """Credential, token and user-metadata operations over the profiles table"""

    def __init__(self, db: DbSession, revoked: TokenRevocations = revocations):
        self.db = db
        self.revoked = revoked
        self._listeners: List[AuthListener] = []

    # --- events -----------------------------------------------------------

    def on_auth_state_change(self, callback: AuthListener) -> Subscription:
        self._listeners.append(callback)
        return Subscription(self._listeners, callback)

    def _emit(self, event: AuthEvent, session: Optional[Session]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception as e:
                auth_logger.error("Auth listener failed", extra={"auth_event": event.value, "error": str(e)})

    # --- tokens -----------------------------------------------------------

    def _issue(self, profile: Profile) -> Session:
        now = datetime.now(timezone.utc)
        expires_at = now + timedelta(seconds=settings.ACCESS_TOKEN_TTL)
        payload = {
            "sub": profile.id,
            "email": profile.email,
            "role": Role(profile.role).value,
            "jti": str(uuid.uuid4()),
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
        return Session(access_token=token, expires_at=expires_at, user=User.model_validate(profile))

    def _decode(self, token: str) -> dict:
        try:
            claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        except jwt.ExpiredSignatureError as e:
            raise AuthError("Session expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthError("Invalid token") from e

        if self.revoked.is_revoked(claims.get("jti", "")):
            raise AuthError("Session has been signed out")
        return claims

    # --- auth surface -----------------------------------------------------

    def sign_in_with_password(self, email: str, password: str) -> Session:
        profile = self.db.query(Profile).filter(Profile.email == email.lower()).first()
        if not profile or not verify_password(password, profile.password_hash):
            auth_logger.warning("Rejected sign-in", extra={"email": email})
            raise AuthError("Invalid login credentials")

        profile.last_sign_in_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(profile)

        session = self._issue(profile)
        auth_logger.info("User signed in", extra={"user_id": profile.id})
        self._emit(AuthEvent.SIGNED_IN, session)
        return session

    def sign_out(self, session: Session) -> None:
        claims = self._decode(session.access_token)
        self.revoked.revoke(claims["jti"], datetime.fromtimestamp(claims["exp"], tz=timezone.utc))
        auth_logger.info("User signed out", extra={"user_id": claims["sub"]})
        self._emit(AuthEvent.SIGNED_OUT, None)

    def refresh_session(self, session: Session) -> Session:
        claims = self._decode(session.access_token)
        profile = self._profile(claims["sub"])
        self.revoked.revoke(claims["jti"], datetime.fromtimestamp(claims["exp"], tz=timezone.utc))
        refreshed = self._issue(profile)
        self._emit(AuthEvent.TOKEN_REFRESHED, refreshed)
        return refreshed

    def get_user(self, token: str) -> Profile:
        claims = self._decode(token)
        return self._profile(claims["sub"])

    def get_session(self, token: Optional[str]) -> Optional[Session]:
        if not token:
            return None
        try:
            claims = self._decode(token)
            profile = self._profile(claims["sub"])
        except AuthError:
            return None
        return Session(
            access_token=token,
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
            user=User.model_validate(profile),
        )

    def update_user(self, user_id: str, metadata: UserMetadataUpdate) -> User:
        profile = self.db.query(Profile).filter(Profile.id == user_id).first()
        if not profile:
            raise NotFound("User", user_id)

        for field, value in metadata.model_dump(exclude_unset=True).items():
            setattr(profile, field, value)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(profile)

        user = User.model_validate(profile)
        self._emit(AuthEvent.USER_UPDATED, None)
        return user

    def _profile(self, user_id: str) -> Profile:
        profile = self.db.query(Profile).filter(Profile.id == user_id).first()
        if not profile:
            raise AuthError("User no longer exists")
        return profile

    # --- administration ---------------------------------------------------

    def list_users(self) -> List[Profile]:
        return self.db.query(Profile).order_by(Profile.created_at.desc(), Profile.email).all()

    def create_user(self, data: UserCreate) -> Profile:
        email = data.email.lower()
        if self.db.query(Profile).filter(Profile.email == email).first():
            raise ValidationFailed("A user with this email already exists")

        profile = Profile(
            email=email,
            full_name=data.full_name,
            role=data.role,
            password_hash=hash_password(data.password),
        )
        self.db.add(profile)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(profile)
        auth_logger.info("Created user", extra={"user_id": profile.id, "role": profile.role.value})
        return profile

    def set_role(self, acting_user: Profile, user_id: str, role: Role) -> User:
        if acting_user.id == user_id:
            raise PermissionDenied("You cannot change your own role")
        return self.update_user(user_id, UserMetadataUpdate(role=role))

    def delete_user(self, acting_user: Profile, user_id: str) -> None:
        if acting_user.id == user_id:
            raise PermissionDenied("You cannot delete your own account")

        profile = self.db.query(Profile).filter(Profile.id == user_id).first()
        if not profile:
            raise NotFound("User", user_id)

        self.db.delete(profile)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        auth_logger.info("Deleted user", extra={"user_id": user_id})

    def ensure_admin(self, email: str, password: str) -> Profile:
        """Create the bootstrap admin account if it is missing"""
        existing = self.db.query(Profile).filter(Profile.email == email.lower()).first()
        if existing:
            return existing
        return self.create_user(UserCreate(email=email, password=password, role=Role.ADMIN))


SessionListener = Callable[["SessionProvider"], None]


class SessionProvider:
    """Current user and session for one consumer, kept in sync with an AuthClient.

    ``loading`` stays true until ``initialize`` has resolved the first
    session check. Subscribers are called after every change.
    """

    def __init__(self, client: AuthClient):
        self.client = client
        self.user: Optional[User] = None
        self.session: Optional[Session] = None
        self.loading = True
        self._listeners: List[SessionListener] = []
        self._subscription = client.on_auth_state_change(self._handle_auth_event)

    def initialize(self, token: Optional[str] = None) -> Optional[Session]:
        self._set(self.client.get_session(token))
        self.loading = False
        self._notify()
        return self.session

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def sign_in(self, email: str, password: str) -> Optional[AuthError]:
        """Returns the error instead of raising, state follows the auth event"""
        try:
            self.client.sign_in_with_password(email, password)
        except AuthError as e:
            return e
        return None

    def sign_out(self) -> Optional[AuthError]:
        if self.session is None:
            return None
        try:
            self.client.sign_out(self.session)
        except AuthError as e:
            self._set(None)
            self._notify()
            return e
        return None

    def refresh(self) -> Optional[Session]:
        if self.session is None:
            return None
        try:
            return self.client.refresh_session(self.session)
        except AuthError:
            self._set(None)
            self._notify()
            return None

    def close(self) -> None:
        self._subscription.unsubscribe()
        self._listeners.clear()

    def _set(self, session: Optional[Session]) -> None:
        self.session = session
        self.user = session.user if session else None

    def _handle_auth_event(self, event: AuthEvent, session: Optional[Session]) -> None:
        if event == AuthEvent.USER_UPDATED:
            if self.session is not None:
                self._set(self.client.get_session(self.session.access_token))
        else:
            self._set(session)
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
