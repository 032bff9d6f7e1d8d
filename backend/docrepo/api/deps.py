# backend/docrepo/api/deps.py
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import AuthError
from ..models import Profile, Role
from ..services.auth import AuthClient
from ..utils.logging import api_logger

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_client(db: Session = Depends(get_db)) -> AuthClient:
    return AuthClient(db)


def get_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> Optional[str]:
    return credentials.credentials if credentials else None


def get_optional_user(
        token: Optional[str] = Depends(get_token),
        auth: AuthClient = Depends(get_auth_client)
) -> Optional[Profile]:
    if not token:
        return None
    try:
        return auth.get_user(token)
    except AuthError:
        return None


def get_current_user(
        token: Optional[str] = Depends(get_token),
        auth: AuthClient = Depends(get_auth_client)
) -> Profile:
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated",
                            headers={"WWW-Authenticate": "Bearer"})
    try:
        return auth.get_user(token)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e), headers={"WWW-Authenticate": "Bearer"})


def require_roles(*roles: Role):
    def dependency(user: Profile = Depends(get_current_user)) -> Profile:
        if Role(user.role) not in roles:
            api_logger.warning("Role not allowed", extra={
                "user_id": user.id,
                "role": Role(user.role).value,
                "required": [role.value for role in roles]
            })
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return dependency


require_admin = require_roles(Role.ADMIN)
require_editor = require_roles(Role.ADMIN, Role.EDITOR)
