from fastapi import APIRouter, Depends, Request, Response, status, Query
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from twex.config import Settings
from twex.db.session import get_db
from twex.models.user import User
from twex.schemas.auth_schema import SignupRequest, SigninRequest
from twex.schemas.user_schema import UserEnvelope, UserPublic
from twex.schemas.post_schema import MessageResponse
from twex.services.auth_service import (
    AuthService,
    get_app_settings,
    get_optional_user,
    get_request_token,
    set_session_cookie,
    clear_session_cookie,
)
from twex.services.oauth_service import GoogleOAuthClient, OAuthError, get_google_client
from twex.utils.exceptions import TwexError, ServiceUnavailableError
from twex.utils.rate_limit import limiter, auth_limit

logger = logging.getLogger(__name__)

router = APIRouter()

def _user_response(user: User, status_code: int) -> JSONResponse:
    body = UserEnvelope(user=UserPublic.model_validate(user)).model_dump(mode="json")
    return JSONResponse(content=body, status_code=status_code)

@router.post("/signup", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
@limiter.limit(auth_limit)
async def signup(
    request: Request,
    user_data: SignupRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Create an account and sign it in"""
    try:
        auth_service = AuthService(db, settings)
        user = await auth_service.create_user(user_data)
        token = await auth_service.create_session(user)

        response = _user_response(user, status.HTTP_201_CREATED)
        set_session_cookie(response, token, settings)
        return response
    except TwexError:
        raise
    except Exception as e:
        logger.error(f"Signup error: {e}")
        raise TwexError()

@router.post("/signin", response_model=UserEnvelope)
@limiter.limit(auth_limit)
async def signin(
    request: Request,
    credentials: SigninRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Sign in with username (or email) and password"""
    try:
        auth_service = AuthService(db, settings)
        user = await auth_service.authenticate_user(credentials.username, credentials.password)
        token = await auth_service.create_session(user)

        logger.info(f"User {user.id} signed in")
        response = _user_response(user, status.HTTP_200_OK)
        set_session_cookie(response, token, settings)
        return response
    except TwexError:
        raise
    except Exception as e:
        logger.error(f"Signin error: {e}")
        raise TwexError()

@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    token: Optional[str] = Depends(get_request_token),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """End the current session"""
    try:
        if token:
            await AuthService(db, settings).end_session(token)
        clear_session_cookie(response, settings)
        return {"message": "Logged out"}
    except Exception as e:
        logger.error(f"Logout error: {e}")
        raise TwexError()

@router.get("/check", response_model=UserEnvelope)
async def check(current_user: Optional[User] = Depends(get_optional_user)):
    """Current identity, or null when signed out"""
    return {"user": UserPublic.model_validate(current_user) if current_user else None}

@router.get("/google")
async def google_login(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    google: GoogleOAuthClient = Depends(get_google_client),
):
    """Redirect to Google's consent screen"""
    if not settings.google_oauth_enabled:
        raise ServiceUnavailableError("Google sign-in is not configured")

    state = AuthService(db, settings).create_state_token()
    return RedirectResponse(url=google.authorization_url(state))

@router.get("/google/callback")
@router.get("/google/twex", include_in_schema=False)
async def google_callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    google: GoogleOAuthClient = Depends(get_google_client),
):
    """Finish Google sign-in and return to the frontend"""
    failure = RedirectResponse(url=f"{settings.FRONTEND_URL.rstrip('/')}/")
    auth_service = AuthService(db, settings)

    if not code or not state or not auth_service.verify_state_token(state):
        logger.warning("Google callback with missing or invalid state")
        return failure

    try:
        profile = await google.fetch_profile(code)
    except OAuthError as e:
        logger.error(f"Google sign-in failed: {e}")
        return failure

    try:
        user = await auth_service.get_or_create_oauth_user(profile)
        token = await auth_service.create_session(user)
    except Exception as e:
        logger.error(f"Google sign-in error: {e}")
        raise TwexError()

    logger.info(f"User {user.id} signed in with Google")
    response = RedirectResponse(url=f"{settings.FRONTEND_URL.rstrip('/')}/home")
    set_session_cookie(response, token, settings)
    return response
