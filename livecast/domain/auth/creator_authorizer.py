"""Authorization collaborator for creator actions.

Authentication happens upstream; the gateway forwards the caller identity in
headers. This module only decides whether that caller may act for a creator.
"""

from enum import Enum
from typing import Protocol

from pydantic import BaseModel


class UserRole(str, Enum):
    VIEWER = "viewer"
    MEMBER = "member"
    CREATOR = "creator"
    ADMIN = "admin"

    def __str__(self) -> str:
        return self.value


class UserStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    BANNED = "banned"

    def __str__(self) -> str:
        return self.value


class Caller(BaseModel):
    """Identity of the user making the request."""

    user_id: str
    role: UserRole = UserRole.VIEWER
    status: UserStatus = UserStatus.ACTIVE
    is_member: bool = False

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE


class CreatorAuthorizer(Protocol):
    def can_create_session(self, caller: Caller, creator_id: str) -> bool: ...

    def can_boost(self, caller: Caller, creator_id: str) -> bool: ...


class GatewayCreatorAuthorizer:
    """Trusts the role and status the gateway attached to the caller."""

    def can_create_session(self, caller: Caller, creator_id: str) -> bool:
        return caller.is_active and caller.user_id == creator_id and caller.role == UserRole.CREATOR

    def can_boost(self, caller: Caller, creator_id: str) -> bool:
        if not caller.is_active:
            return False
        return caller.is_admin or (caller.role == UserRole.CREATOR and caller.user_id == creator_id)


__all__ = ["Caller", "CreatorAuthorizer", "GatewayCreatorAuthorizer", "UserRole", "UserStatus"]
