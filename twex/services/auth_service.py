from datetime import datetime, timedelta
from typing import Optional
import logging
import re
import secrets

from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, Request, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select, delete, or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from twex.config import Settings
from twex.db.base import utcnow
from twex.db.session import get_db
from twex.models.session import UserSession
from twex.models.user import User
from twex.schemas.auth_schema import SignupRequest, TokenData, GoogleProfile
from twex.utils.exceptions import AuthenticationError, ValidationError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)

class AuthService:
    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash"""
        return pwd_context.verify(plain_password, hashed_password)

    def get_password_hash(self, password: str) -> str:
        """Hash a password"""
        return pwd_context.hash(password)

    async def create_user(self, user_data: SignupRequest) -> User:
        """Create a local account"""
        if not user_data.username or not user_data.email or not user_data.password:
            raise ValidationError("Missing fields")

        if await self._account_exists(user_data.username, user_data.email):
            raise ValidationError("Email or username already in use")

        user = User(
            username=user_data.username,
            email=user_data.email,
            password=self.get_password_hash(user_data.password),
        )

        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same name or email
            await self.db.rollback()
            raise ValidationError("Email or username already in use")
        await self.db.refresh(user)

        logger.info(f"Created user {user.id} ({user.username})")
        return user

    async def _account_exists(self, username: str, email: str) -> bool:
        stmt = select(User.id).where(
            or_(
                func.lower(User.email) == email.lower(),
                User.username == username,
            )
        )
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def authenticate_user(self, username: str, password: str) -> User:
        """Authenticate by username or email"""
        stmt = select(User).where(
            (User.username == username) | (func.lower(User.email) == username.lower())
        )
        result = await self.db.execute(stmt)
        user = result.scalars().first()

        # OAuth-only accounts have no password to check against
        if not user or not user.password or not self.verify_password(password, user.password):
            raise AuthenticationError("Invalid username or password")

        return user

    async def get_or_create_oauth_user(self, profile: GoogleProfile) -> User:
        """Find the account owning a Google email, creating one on first login"""
        stmt = select(User).where(func.lower(User.email) == profile.email.lower())
        result = await self.db.execute(stmt)
        user = result.scalar_one_or_none()
        if user:
            return user

        username = await self._available_username(profile.name or profile.email.split("@")[0])
        user = User(
            username=username,
            email=profile.email,
            avatar_url=profile.picture,
        )

        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)

        logger.info(f"Created user {user.id} ({user.username}) from Google sign-in")
        return user

    async def _available_username(self, display_name: str) -> str:
        base = re.sub(r"\s+", "", display_name)[:90] or "user"
        candidate = base
        suffix = 1
        while True:
            result = await self.db.execute(select(User.id).where(User.username == candidate))
            if result.first() is None:
                return candidate
            suffix += 1
            candidate = f"{base}{suffix}"

    async def create_session(self, user: User) -> str:
        """Open a session for a user and return its signed token"""
        await self.prune_expired_sessions()

        expires_at = utcnow() + timedelta(hours=self.settings.SESSION_MAX_AGE_HOURS)
        sid = secrets.token_urlsafe(32)

        self.db.add(UserSession(sid=sid, user_id=user.id, expires_at=expires_at))
        await self.db.commit()

        return self.create_session_token(user.id, sid, expires_at)

    async def prune_expired_sessions(self) -> int:
        """Delete every session whose expiry has passed"""
        result = await self.db.execute(
            delete(UserSession).where(UserSession.expires_at <= utcnow())
        )
        if result.rowcount:
            logger.info(f"Pruned {result.rowcount} expired sessions")
        return result.rowcount or 0

    def create_session_token(self, user_id: int, sid: str, expires_at: datetime) -> str:
        """Create the JWT stored in the session cookie"""
        to_encode = {"sub": str(user_id), "sid": sid, "exp": expires_at, "type": "session"}
        return jwt.encode(to_encode, self.settings.SECRET_KEY, algorithm=self.settings.ALGORITHM)

    def decode_session_token(self, token: str) -> Optional[TokenData]:
        """Verify a session token's signature and expiry"""
        try:
            payload = jwt.decode(token, self.settings.SECRET_KEY, algorithms=[self.settings.ALGORITHM])
        except JWTError:
            return None

        if payload.get("type") != "session":
            return None

        sub = payload.get("sub")
        sid = payload.get("sid")
        if sub is None or sid is None:
            return None

        try:
            return TokenData(user_id=int(sub), sid=sid)
        except ValueError:
            return None

    async def resolve_session(self, token: str) -> Optional[User]:
        """Return the user behind a live session token"""
        token_data = self.decode_session_token(token)
        if token_data is None:
            return None

        stmt = select(User).join(UserSession, UserSession.user_id == User.id).where(
            UserSession.sid == token_data.sid,
            UserSession.user_id == token_data.user_id,
            UserSession.expires_at > utcnow(),
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def end_session(self, token: str) -> None:
        """Delete the session a token refers to"""
        token_data = self.decode_session_token(token)
        if token_data is None:
            return

        await self.db.execute(delete(UserSession).where(UserSession.sid == token_data.sid))
        await self.db.commit()
        logger.info(f"Closed session for user {token_data.user_id}")

    def create_state_token(self) -> str:
        """Signed OAuth state parameter"""
        expire = utcnow() + timedelta(minutes=self.settings.OAUTH_STATE_EXPIRE_MINUTES)
        to_encode = {"nonce": secrets.token_urlsafe(16), "exp": expire, "type": "oauth_state"}
        return jwt.encode(to_encode, self.settings.SECRET_KEY, algorithm=self.settings.ALGORITHM)

    def verify_state_token(self, state: str) -> bool:
        try:
            payload = jwt.decode(state, self.settings.SECRET_KEY, algorithms=[self.settings.ALGORITHM])
        except JWTError:
            return False
        return payload.get("type") == "oauth_state"

def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_MAX_AGE_HOURS * 3600,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "lax",
    )

def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "lax",
    )

def get_app_settings(request: Request) -> Settings:
    """Dependency returning the settings the running app was built with"""
    return request.app.state.settings

def get_request_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """Session token from the Authorization header, else from the cookie"""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(request.app.state.settings.SESSION_COOKIE_NAME)

async def get_optional_user(
    token: Optional[str] = Depends(get_request_token),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Optional[User]:
    """Dependency to get the signed-in user, or None"""
    if not token:
        return None
    return await AuthService(db, settings).resolve_session(token)

async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """Dependency to get current authenticated user"""
    if user is None:
        raise AuthenticationError()
    return user
