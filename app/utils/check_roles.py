from fastapi import Depends, status
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.utils.get_user import get_current_user
from app.utils.logger import get_logger
from app.models.users.user_models import User

logger = get_logger("auth.roles")


def require_role(roles: list[str]):
    """Dependency that lets through authenticated users holding one of ``roles``."""
    allowed = {r.lower() for r in roles}

    async def role_checker(user: User = Depends(get_current_user)) -> User:
        role = (user.role or "").lower()
        if role not in allowed:
            logger.warning(
                "Role check failed",
                extra={"user_id": str(user.id), "role": role, "required": sorted(allowed)},
            )
            raise AppException(
                status.HTTP_403_FORBIDDEN,
                "Forbidden: insufficient privileges",
                ErrorCode.PERMISSION_DENIED,
            )
        return user

    return role_checker
