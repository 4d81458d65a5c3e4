from dataclasses import dataclass, field
from typing import Tuple

ADMIN_ROLE = "admin"

@dataclass(frozen=True)
class Actor:
    """The authenticated caller of a mutating operation."""
    user_id: str
    roles: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_admin(self) -> bool:
        return ADMIN_ROLE in self.roles

    def can_manage(self, provider_id: str) -> bool:
        return self.is_admin or self.user_id == provider_id
