# backend/app/core/errors.py

"""
Error taxonomy for the travel agent.

- ConfigurationError: a required credential is missing (fatal to the call)
- UpstreamError: a provider failed; source tells the caller whether to degrade
  ("flight") or fail the turn ("generation")
- AuthError: flight-provider credential exchange failed
- ParseError: an embedded payload or a provider body could not be parsed
- TurnCancelled: the client stopped waiting for a turn (not an error for the user)
"""

from typing import Optional


class TravelAgentError(Exception):
    """Base exception for every error raised by the travel agent."""


class ConfigurationError(TravelAgentError):
    def __init__(self, setting: str):
        self.setting = setting
        super().__init__(f"{setting} not configured")


class UpstreamError(TravelAgentError):
    def __init__(self, source: str, reason: str, status_code: Optional[int] = None):
        self.source = source
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"{source} provider error: {reason}")


class AuthError(UpstreamError):
    def __init__(self, reason: str, status_code: Optional[int] = None):
        super().__init__("flight", reason, status_code)


class ParseError(TravelAgentError):
    """A structured payload could not be decoded or validated."""


class TurnCancelled(TravelAgentError):
    """Raised inside the client when the awaited turn was superseded or interrupted."""


class PersistenceError(TravelAgentError):
    """The conversation log could not be read or written."""


class DispatchError(TravelAgentError):
    """The dispatch endpoint answered with a failure (client side)."""
    def __init__(self, reason: str, status_code: Optional[int] = None):
        self.reason = reason
        self.status_code = status_code
        super().__init__(reason)
