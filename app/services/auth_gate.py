"""
Authorization gate for mutating category operations.
"""
from typing import Iterable, Optional
import hmac
import logging

from app.utils.exceptions import AuthenticationError
from app.utils.messages import Messages

logger = logging.getLogger(__name__)


class TokenAuthGate:
    """
    Bearer-token gate.

    A request passes when its ``Authorization: Bearer <token>`` header
    carries one of the configured tokens. With the gate disabled every
    request passes as the ``anonymous`` principal.
    """

    def __init__(self, tokens: Iterable[str], enabled: bool = True):
        self.tokens = [token for token in tokens if token]
        self.enabled = enabled
        if enabled and not self.tokens:
            logger.warning("Auth gate enabled without tokens; all mutating requests will be rejected")

    def authorize(self, authorization: Optional[str]) -> str:
        """Return the principal for an Authorization header or raise AuthenticationError."""
        if not self.enabled:
            return "anonymous"

        if not authorization or not authorization.startswith("Bearer "):
            raise AuthenticationError(Messages.ACCESS_DENIED)

        token = authorization.split(" ", 1)[1].strip()
        if not token:
            raise AuthenticationError(Messages.ACCESS_DENIED)

        for known in self.tokens:
            if hmac.compare_digest(token.encode("utf-8"), known.encode("utf-8")):
                return f"token:{token[:4]}"

        raise AuthenticationError(Messages.INVALID_TOKEN)
