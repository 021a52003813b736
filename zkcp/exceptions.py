"""
Common exception classes.
"""


class ZkcpError(Exception):
    """Base class of all errors raised by this package."""


class InvalidParameters(ZkcpError):
    """Group parameters are not a valid safe-prime subgroup description."""


class GenerationTimeout(ZkcpError):
    """No valid group was found within the time budget."""


class MaterialNotFound(ZkcpError):
    """No group parameters are provisioned for the user."""


class UserNotFound(ZkcpError):
    """The user has not registered."""


class ChallengeNotFound(ZkcpError):
    """Unknown, expired or already consumed authentication id."""


class InvalidArgument(ZkcpError):
    """Malformed or out-of-range protocol value."""


class ProtocolError(ZkcpError):
    """Transition requested from a state that does not allow it."""
