"""Identity provider protocol."""

from dataclasses import dataclass, field
from typing import Any, Protocol
from uuid import UUID


@dataclass(frozen=True)
class AnonymousSession:
    """A freshly minted backend identity and its bearer token.

    Lives for one webhook request only; the token scopes store access to the
    rows its identity may see.
    """

    user_id: UUID
    access_token: str
    claims: dict[str, Any] = field(default_factory=dict)


class IIdentityProvider(Protocol):
    """Protocol for minting per-request identities."""

    async def sign_in_anonymously(self) -> AnonymousSession:
        """
        Mint a new anonymous identity.

        Returns:
            The session for the new identity

        Raises:
            IdentityProvisioningError: If the auth service cannot issue one
        """
        ...
