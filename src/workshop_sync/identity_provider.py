"""Contract for the third-party identity provider."""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class CredentialHolder(Protocol):
    """The signed-in user as seen by the identity provider."""

    uid: str

    async def get_token(self, force_refresh: bool = False) -> str:
        """Return an access token, asking the provider to reissue it when forced."""
        ...


@runtime_checkable
class IdentityProvider(Protocol):
    def get_current_credential_holder(self) -> Optional[CredentialHolder]: ...

    async def sign_out(self) -> None: ...


__all__ = ["CredentialHolder", "IdentityProvider"]
