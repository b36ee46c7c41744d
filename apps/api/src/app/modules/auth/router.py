"""
Authentication Router

- POST  /auth/login        - Sign in with email and password
- POST  /auth/register     - Register a school administrator and their school
- POST  /auth/refresh      - Exchange a refresh token
- POST  /auth/logout       - Revoke the current access token
- GET   /auth/me           - Current session snapshot (identity, user, school)
- PATCH /auth/me/profile   - Update the caller's own profile
- WS    /auth/session      - Live session snapshots (token passed as query param)
"""

import asyncio
import logging

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, authenticate_token, get_current_user
from app.core.database import get_db
from app.core.events import event_bus
from app.core.rate_limit import enforce_rate_limit
from app.modules.auth import service
from app.modules.auth.schemas import (
    LoginRequest,
    LoginResponse,
    ProfileUpdateRequest,
    RefreshRequest,
    RegisterRequest,
    SessionSnapshotResponse,
    TokenResponse,
)
from app.modules.auth.session import SessionContext
from app.modules.schools.schemas import SchoolResponse
from app.modules.shared import ServiceError, to_http_exception
from app.modules.users.schemas import MemberResponse

logger = logging.getLogger(__name__)

router = APIRouter()

RATE_LIMIT_LOGIN = (10, 300)
RATE_LIMIT_REGISTER = (5, 3600)

WS_POLICY_VIOLATION = 1008


def _login_response(result: service.AuthResult) -> LoginResponse:
    return LoginResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        user=MemberResponse.model_validate(result.user),
        school=SchoolResponse.model_validate(result.school) if result.school else None,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """
    Authenticate and return JWT tokens with the user and school documents.

    Raises:
        HTTPException 401: Invalid credentials
        HTTPException 403: Account disabled or deactivated
        HTTPException 429: Too many attempts for this email
    """
    await enforce_rate_limit(f"auth:login:{credentials.email.lower()}", *RATE_LIMIT_LOGIN)

    try:
        result = await service.sign_in(db, credentials.email, credentials.password)
    except ServiceError as e:
        raise to_http_exception(e) from e

    return _login_response(result)


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """
    Create the administrator identity, user document and school atomically.

    Raises:
        HTTPException 409: Email already registered
        HTTPException 400: Creation failed (nothing was persisted)
    """
    await enforce_rate_limit(f"auth:register:{data.email.lower()}", *RATE_LIMIT_REGISTER)

    try:
        result = await service.sign_up(db, data)
    except ServiceError as e:
        raise to_http_exception(e) from e

    return _login_response(result)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    data: RefreshRequest,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    try:
        access_token, refresh_token = await service.refresh_session(db, data.refresh_token)
    except ServiceError as e:
        raise to_http_exception(e) from e

    return TokenResponse(access_token=access_token, refresh_token=refresh_token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(user: CurrentUser = Depends(get_current_user)) -> None:
    await service.sign_out(user)


@router.get("/me", response_model=SessionSnapshotResponse)
async def me(user: CurrentUser = Depends(get_current_user)) -> SessionSnapshotResponse:
    """One-shot session snapshot for the caller."""
    context = SessionContext(event_bus)
    try:
        await context.set_identity(user)
        return SessionSnapshotResponse(**context.snapshot())
    finally:
        await context.close()


@router.patch("/me/profile", response_model=MemberResponse)
async def update_profile(
    data: ProfileUpdateRequest,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> MemberResponse:
    try:
        updated = await service.update_user_profile(db, user, data.profile)
    except ServiceError as e:
        raise to_http_exception(e) from e

    return MemberResponse.model_validate(updated)


@router.websocket("/session")
async def session_stream(websocket: WebSocket, token: str = Query(...)) -> None:
    """
    Stream session snapshots to the client.

    The first message is the initial snapshot; later messages follow every
    change to the caller's user document or their school.
    """
    try:
        user = await authenticate_token(token)
    except HTTPException:
        await websocket.close(code=WS_POLICY_VIOLATION)
        return

    await websocket.accept()
    context = SessionContext(event_bus)

    async def _wait_for_disconnect() -> None:
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            logger.debug(f"Session socket closed by client for user {user.id}")
        finally:
            await context.close()

    listener = asyncio.create_task(_wait_for_disconnect())
    try:
        await context.set_identity(user)
        async for snapshot in context.updates():
            await websocket.send_json(snapshot)
    except WebSocketDisconnect:
        logger.debug(f"Session socket dropped for user {user.id}")
    finally:
        await context.close()
        listener.cancel()
