"""
Caller identity value objects.
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class Role(str, Enum):
    """Platform role supplied by the session provider."""

    CUSTOMER = "CUSTOMER"
    DEALER = "DEALER"
    TECHNICIAN = "TECHNICIAN"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class Actor:
    """Authenticated caller of a workflow operation."""

    user_id: UUID
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_dealer(self) -> bool:
        return self.role == Role.DEALER

    @property
    def is_technician(self) -> bool:
        return self.role == Role.TECHNICIAN

    def owns(self, owner_id: UUID) -> bool:
        """Check if the actor is the owner, admins act on behalf of anyone."""
        return self.is_admin or self.user_id == owner_id
