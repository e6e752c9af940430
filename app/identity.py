"""Caller identity passed explicitly into every core operation (no ambient session state)."""
from dataclasses import dataclass

from app.exceptions import AuthenticationRequired


@dataclass(frozen=True)
class Identity:
    user_id: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    def require_user_id(self) -> str:
        if not self.user_id:
            raise AuthenticationRequired()
        return self.user_id


ANONYMOUS = Identity()
