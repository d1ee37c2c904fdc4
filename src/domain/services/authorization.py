"""Server-side role checks shared by the domain services.

Roles are always read from the users table; nothing the client sends
about its own role is trusted.
"""

from uuid import UUID

from core.exceptions import AuthorizationError, NotOwnerError, UserNotFoundError
from domain.entities.property import Property
from domain.entities.user import User, UserType
from domain.repositories.unit_of_work import IUnitOfWork


async def require_user(uow: IUnitOfWork, user_id: UUID) -> User:
    """Load the acting user. Raises UserNotFoundError if unknown."""
    user = await uow.users.get(user_id)
    if not user:
        raise UserNotFoundError(str(user_id))
    return user


async def require_role(uow: IUnitOfWork, user_id: UUID, *allowed: UserType) -> User:
    """Load the acting user and check their type is one of ``allowed``."""
    user = await require_user(uow, user_id)
    if user.user_type not in allowed:
        raise AuthorizationError(
            f"Requires role: {' or '.join(a.value for a in allowed)}",
            details={"role": user.user_type.value},
        )
    return user


async def require_admin(uow: IUnitOfWork, user_id: UUID) -> User:
    return await require_role(uow, user_id, UserType.ADMIN)


def require_owner_or_admin(user: User, property: Property) -> None:
    """Allow the property's owner and any admin."""
    if user.is_admin:
        return
    if property.owner_id != user.id:
        raise NotOwnerError(str(property.id))
