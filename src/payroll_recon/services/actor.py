"""Acting identity passed explicitly into every service operation."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from payroll_recon.exceptions import AuthorizationError
from payroll_recon.models.user import AppUser, UserRole


@dataclass(frozen=True)
class Actor:
    """Who is performing an operation."""

    user_id: UUID
    role: str
    employer_id: UUID | None = None

    @classmethod
    def from_user(cls, user: AppUser) -> Actor:
        return cls(user_id=user.user_id, role=user.role, employer_id=user.employer_id)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def require_role(self, *roles: UserRole, action: str = "perform this action") -> None:
        """Raise AuthorizationError unless the actor holds one of ``roles``."""
        allowed = {r.value for r in roles}
        if self.role not in allowed:
            raise AuthorizationError(
                f"Role '{self.role}' is not allowed to {action}",
                role=self.role,
            )

    def require_admin(self, action: str = "perform this action") -> None:
        self.require_role(UserRole.ADMIN, action=action)
