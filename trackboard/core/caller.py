"""
Caller identity passed explicitly through every service call.

The JWT middleware builds a ``Caller`` from the verified token claims and
stores it on ``flask.g``; route handlers read it once and hand it to the
service layer, which never looks at request globals.
"""

from dataclasses import dataclass

from trackboard.models.auth import ROLE_ADMIN


@dataclass(frozen=True)
class Caller:
    id: str
    username: str
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @classmethod
    def from_claims(cls, claims: dict) -> "Caller":
        return cls(
            id=claims["sub"],
            username=claims.get("username", ""),
            email=claims.get("email", ""),
            role=claims.get("role", ""),
        )
