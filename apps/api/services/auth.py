from dataclasses import dataclass
from typing import Optional

from supabase import Client


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: Optional[str] = None


class SupabaseAuth:
    """
    Resolves the caller's Supabase access token to an identity.
    Best-effort: no token, no client or any auth error means "no identity".
    """

    def __init__(self, client: Optional[Client], access_token: Optional[str]):
        self.client = client
        self.access_token = access_token

    def get_current_user(self) -> Optional[Identity]:
        if not self.client or not self.access_token:
            return None
        try:
            res = self.client.auth.get_user(self.access_token)
        except Exception as e:
            print(f"[auth] get_user failed: {e}")
            return None
        user = getattr(res, "user", None) if res is not None else None
        if user is None:
            return None
        return Identity(user_id=str(user.id), email=getattr(user, "email", None))


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an 'Authorization: Bearer <token>' header value."""
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        return None
    return parts[1]
