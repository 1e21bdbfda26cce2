"""The authenticated caller, as supplied by the identity collaborator."""

from __future__ import annotations

from dataclasses import dataclass

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Requester:
    user_id: str | None = None
    email: str | None = None
    role: str = "customer"

    @property
    def is_privileged(self) -> bool:
        return self.role == ADMIN_ROLE

    @staticmethod
    def admin(user_id: str = "admin") -> Requester:
        return Requester(user_id=user_id, role=ADMIN_ROLE)
