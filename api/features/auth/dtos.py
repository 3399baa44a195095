"""DTOs for the Auth feature."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AuthContext:
    """Identity of the authenticated caller, threaded through each request."""

    user_id: str
    session_id: str
    email: Optional[str] = None
