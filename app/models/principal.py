from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Identity recovered from a validated session token.

    user_id: subject from the JWT
    roles: platform roles (admin, user)
    """

    user_id: str
    roles: frozenset[str]

    @classmethod
    def from_claims(cls, claims: dict) -> Principal:
        return cls(user_id=claims["sub"], roles=frozenset(claims.get("roles", [])))

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def is_system_admin(self) -> bool:
        return "admin" in self.roles
