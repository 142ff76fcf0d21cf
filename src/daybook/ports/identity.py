"""Identity and authentication interfaces."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class Identity:
    """Who the cache is acting for. user_id is None while signed out."""

    user_id: str | None = None
    auth_loading: bool = False

    @property
    def is_ready(self) -> bool:
        return not self.auth_loading and self.user_id is not None


class AuthService(Protocol):
    """Interface for email/password authentication."""

    def sign_in(self, email: str, password: str) -> Identity:
        """Authenticate and persist the session."""
        ...

    def sign_up(self, email: str, password: str, full_name: str = "") -> None:
        """Register a new account."""
        ...

    def sign_out(self) -> None:
        """End the session."""
        ...

    def current_identity(self) -> Identity:
        """Resolve the signed-in user, refreshing the session if needed."""
        ...
