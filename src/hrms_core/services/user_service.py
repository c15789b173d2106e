"""User account service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from hrms_core.exceptions import ConflictError, NotFoundError, StateConflictError, ValidationError
from hrms_core.models import Role, User, UserRole
from hrms_core.repositories import (
    OrganizationRepository,
    RoleRepository,
    UserRepository,
    UserRoleRepository,
)
from hrms_core.services.common import require

logger = logging.getLogger(__name__)

_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

MIN_PASSWORD_LENGTH = 8


@dataclass
class UserData:
    organization_id: UUID
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None


class UserService:
    """Service for login accounts and their role assignments."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)
        self.organizations = OrganizationRepository(session)
        self.roles = RoleRepository(session)
        self.user_roles = UserRoleRepository(session)

    async def create_user(self, data: UserData, password: str) -> User:
        require(data.username, "Username is required")
        require(data.email, "Email is required")
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        if await self.organizations.get(data.organization_id) is None:
            raise NotFoundError("Organization", data.organization_id)

        if await self.users.exists_by_username(data.username):
            raise ConflictError("Username already exists")
        if await self.users.find_by_organization_and_email(data.organization_id, data.email):
            raise ConflictError("Email already exists in organization")

        user = User(
            organization_id=data.organization_id,
            username=data.username,
            email=data.email,
            first_name=data.first_name,
            last_name=data.last_name,
            password_hash=_pwd_context.hash(password),
            is_active=True,
        )
        await self.users.add(user)
        logger.info("Created user %s in organization %s", user.username, user.organization_id)
        return user

    async def get_user(self, user_id: UUID) -> User:
        user = await self.users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def get_user_by_username(self, username: str) -> User:
        user = await self.users.find_by_username(username)
        if user is None:
            raise NotFoundError("User", message=f"User not found with username: {username}")
        return user

    async def update_user(
        self,
        user_id: UUID,
        email: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        user = await self.get_user(user_id)
        if email and email != user.email:
            existing = await self.users.find_by_organization_and_email(user.organization_id, email)
            if existing is not None and existing.user_id != user_id:
                raise ConflictError("Email already exists in organization")
            user.email = email
        if first_name is not None:
            user.first_name = first_name
        if last_name is not None:
            user.last_name = last_name
        await self.session.flush()
        return user

    async def activate_user(self, user_id: UUID) -> User:
        user = await self.get_user(user_id)
        if user.is_active:
            raise StateConflictError("User is already active")
        user.is_active = True
        await self.session.flush()
        return user

    async def deactivate_user(self, user_id: UUID) -> User:
        user = await self.get_user(user_id)
        if not user.is_active:
            raise StateConflictError("User is already inactive")
        user.is_active = False
        await self.session.flush()
        return user

    async def assign_role(
        self, user_id: UUID, role_id: UUID, assigned_by: str | None = None
    ) -> UserRole:
        user = await self.get_user(user_id)
        role = await self.roles.get(role_id)
        if role is None:
            raise NotFoundError("Role", role_id)
        if role.organization_id != user.organization_id:
            raise ValidationError("Role must belong to the same organization as the user")

        link = await self.user_roles.find_by_user_and_role(user_id, role_id)
        if link is not None and link.is_active:
            raise ConflictError("User already has this role")

        if link is None:
            link = UserRole(user_id=user_id, role_id=role_id, assigned_by=assigned_by)
            await self.user_roles.add(link)
        else:
            link.is_active = True
            link.assigned_by = assigned_by
            await self.session.flush()
        return link

    async def remove_role(self, user_id: UUID, role_id: UUID) -> None:
        link = await self.user_roles.find_by_user_and_role(user_id, role_id)
        if link is None or not link.is_active:
            raise StateConflictError("User does not have this role")
        link.is_active = False
        await self.session.flush()

    async def get_user_roles(self, user_id: UUID) -> list[Role]:
        await self.get_user(user_id)
        return await self.user_roles.find_active_roles_for_user(user_id)

    async def verify_password(self, username: str, password: str) -> bool:
        """Check a password against the stored hash, upgrading old hashes."""
        user = await self.users.find_by_username(username)
        if user is None or not user.is_active or user.is_locked:
            return False
        valid, new_hash = _pwd_context.verify_and_update(password, user.password_hash)
        if valid and new_hash:
            user.password_hash = new_hash
            await self.session.flush()
        return valid
