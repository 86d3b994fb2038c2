"""Persisted Firebase session state."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

# Refresh this long before the provider-reported expiry
TOKEN_EXPIRY_MARGIN_SECONDS = 300.0


def session_storage_key(api_key: str, app_name: str = "[DEFAULT]") -> str:
    """Key the web SDK uses for the signed-in user; contains ``firebase`` so artifact clearing finds it."""
    return f"firebase:authUser:{api_key}:{app_name}"


@dataclass
class FirebaseSessionRecord:
    uid: str
    refresh_token: str
    id_token: Optional[str] = None
    expires_at: float = 0.0
    email: Optional[str] = None

    def token_is_fresh(self, now: float) -> bool:
        return bool(self.id_token) and now + TOKEN_EXPIRY_MARGIN_SECONDS < self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> Optional["FirebaseSessionRecord"]:
        uid = payload.get("uid")
        refresh_token = payload.get("refresh_token")
        if not isinstance(uid, str) or not isinstance(refresh_token, str) or not uid or not refresh_token:
            return None
        expires_at = payload.get("expires_at")
        return cls(
            uid=uid,
            refresh_token=refresh_token,
            id_token=payload.get("id_token") or None,
            expires_at=float(expires_at) if isinstance(expires_at, (int, float)) else 0.0,
            email=payload.get("email") or None,
        )
