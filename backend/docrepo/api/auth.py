# backend/docrepo/api/auth.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ..errors import AuthError
from ..models import Profile
from ..schemas.auth import Session, SignInRequest, User, UserMetadataUpdate
from ..services.auth import AuthClient
from ..utils.logging import api_logger
from .deps import get_auth_client, get_current_user, get_token

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/sign-in", response_model=Session)
async def sign_in(credentials: SignInRequest, auth: AuthClient = Depends(get_auth_client)):
    try:
        return auth.sign_in_with_password(credentials.email, credentials.password)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))


@router.post("/sign-out")
async def sign_out(token: Optional[str] = Depends(get_token), auth: AuthClient = Depends(get_auth_client)):
    session = auth.get_session(token)
    if session is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    auth.sign_out(session)
    return {"success": True}


@router.post("/refresh", response_model=Session)
async def refresh(token: Optional[str] = Depends(get_token), auth: AuthClient = Depends(get_auth_client)):
    session = auth.get_session(token)
    if session is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        return auth.refresh_session(session)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))


@router.get("/session", response_model=Optional[Session])
async def get_session(token: Optional[str] = Depends(get_token), auth: AuthClient = Depends(get_auth_client)):
    return auth.get_session(token)


@router.get("/me", response_model=User)
async def me(user: Profile = Depends(get_current_user)):
    return user


@router.patch("/me", response_model=User)
async def update_me(
        metadata: UserMetadataUpdate,
        user: Profile = Depends(get_current_user),
        auth: AuthClient = Depends(get_auth_client)
):
    if metadata.role is not None:
        api_logger.warning("Attempt to change own role", extra={"user_id": user.id})
        raise HTTPException(status_code=403, detail="Roles are managed by administrators")
    return auth.update_user(user.id, metadata)
