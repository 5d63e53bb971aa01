"""Header-based identity provider.

For deployments behind a trusted proxy (or local development) that already
authenticated the caller and forwards the identity in a request header.
"""
import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"

_BEARER_PREFIX = re.compile(r"^\s*bearer\s+", re.IGNORECASE)


class HeaderIdentityProvider:
    """Treats the forwarded credential as the external user id."""

    async def authenticate(self, credentials: Optional[str]) -> Optional[str]:
        if not credentials:
            return None
        user_id = _BEARER_PREFIX.sub("", credentials).strip()
        if not user_id:
            logger.debug("Empty identity credential")
            return None
        return user_id
