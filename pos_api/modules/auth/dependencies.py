"""
Authentication dependencies for FastAPI.
"""
from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from pos_api.database.database import get_db
from pos_api.common.exceptions import AuthenticationError, PermissionDeniedError
from .models import User, UserRole
from .utils import verify_token

security = HTTPBearer(auto_error=False)


class AuthDependencies:
    """Reusable auth dependencies."""

    @staticmethod
    def get_current_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
        db: Session = Depends(get_db)
    ) -> User:
        """Resolve the bearer token to an active user."""
        if credentials is None:
            raise AuthenticationError("Not authorized, no token")

        payload = verify_token(credentials.credentials)
        try:
            user_id = UUID(str(payload.get("sub")))
        except ValueError:
            raise AuthenticationError("Not authorized, token failed")

        user = db.get(User, user_id)
        if user is None:
            raise AuthenticationError("User not found")
        if not user.is_active:
            raise AuthenticationError("User account is deactivated")
        return user

    @staticmethod
    def require_roles(*roles: UserRole):
        """Dependency requiring the current user to hold one of ``roles``."""
        allowed = {role.value for role in roles}

        def role_checker(current_user: User = Depends(AuthDependencies.get_current_user)) -> User:
            if current_user.role.value not in allowed:
                raise PermissionDeniedError(
                    f"User role {current_user.role.value} is not authorized to access this route"
                )
            return current_user
        return role_checker


get_current_user = AuthDependencies.get_current_user
require_roles = AuthDependencies.require_roles
require_admin = require_roles(UserRole.ADMIN)
require_manager = require_roles(UserRole.MANAGER, UserRole.ADMIN)
require_cashier = require_roles(UserRole.CASHIER, UserRole.MANAGER, UserRole.ADMIN)
