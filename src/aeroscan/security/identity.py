# Owner Identity Resolver: stable, hashed owner keys for profile storage.
# Created: 2026-10-04
#
# Raw API keys and OAuth subjects never leave this module; only their
# sha256 hashes are used as storage keys.

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass

from aeroscan.api.oauth2.client import TokenExchangeClient
from aeroscan.errors import Unauthorized
from aeroscan.security.auth_resolver import AuthMode, ResolvedAuth

logger = logging.getLogger(__name__)


def _sha256(value: str) -> str:
    return hashlib.sha256(value.encode()).hexdigest()


@dataclass(frozen=True)
class OwnerIdentity:
    owner_id: str
    identity_type: AuthMode
    display_name: str

    def to_dict(self) -> dict[str, str]:
        return {
            "ownerId": self.owner_id,
            "identityType": self.identity_type.value,
            "displayName": self.display_name,
        }


def owner_from_api_key(api_key: str) -> OwnerIdentity:
    digest = _sha256(api_key)
    return OwnerIdentity(
        owner_id=f"api_key:{digest}",
        identity_type=AuthMode.API_KEY,
        display_name=f"API key {digest[:8]}",
    )


def owner_from_subject(subject: str, display_name: str | None = None) -> OwnerIdentity:
    digest = _sha256(subject)
    return OwnerIdentity(
        owner_id=f"oauth:{digest}",
        identity_type=AuthMode.OAUTH,
        display_name=display_name or f"seats.aero {digest[:8]}",
    )


async def resolve_owner_identity(
    auth: ResolvedAuth, token_client: TokenExchangeClient
) -> OwnerIdentity:
    """Derive the owner of *auth*.

    OAuth credentials are looked up against upstream /userinfo; an
    unreachable endpoint or a payload without a subject is Unauthorized.
    """
    if auth.mode is AuthMode.API_KEY:
        return owner_from_api_key(auth.credential)

    user = await token_client.fetch_user_info(auth.credential)
    if user is None:
        raise Unauthorized("unable to verify OAuth identity")
    if not user.subject:
        raise Unauthorized("OAuth identity has no subject")
    return owner_from_subject(user.subject, user.display_name)
