# backend/docrepo/api/users.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..errors import NotFound, PermissionDenied, ValidationFailed
from ..models import Profile
from ..schemas.auth import RoleUpdate, User, UserCreate
from ..services.auth import AuthClient
from ..utils.logging import api_logger
from .deps import get_auth_client, require_admin

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=List[User])
async def list_users(auth: AuthClient = Depends(get_auth_client), admin: Profile = Depends(require_admin)):
    return auth.list_users()


@router.post("", response_model=User)
async def create_user(
        data: UserCreate,
        auth: AuthClient = Depends(get_auth_client),
        admin: Profile = Depends(require_admin)
):
    api_logger.info("Creating user", extra={"email": data.email, "role": data.role.value})
    try:
        return auth.create_user(data)
    except ValidationFailed as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.put("/{user_id}/role", response_model=User)
async def update_role(
        user_id: str,
        data: RoleUpdate,
        auth: AuthClient = Depends(get_auth_client),
        admin: Profile = Depends(require_admin)
):
    api_logger.info("Updating user role", extra={"user_id": user_id, "role": data.role.value})
    try:
        return auth.set_role(admin, user_id, data.role)
    except PermissionDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFound:
        raise HTTPException(status_code=404, detail="User not found")


@router.delete("/{user_id}")
async def delete_user(
        user_id: str,
        auth: AuthClient = Depends(get_auth_client),
        admin: Profile = Depends(require_admin)
):
    api_logger.info("Deleting user", extra={"user_id": user_id})
    try:
        auth.delete_user(admin, user_id)
    except PermissionDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFound:
        raise HTTPException(status_code=404, detail="User not found")
    return {"success": True}
