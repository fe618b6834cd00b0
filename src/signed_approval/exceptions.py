"""Errors raised while checking signed approvals.

A well-formed signature over different request fields is not an error: the
verifier returns ``False`` for it. Everything here means the input itself
could not be used.
"""


class SignedApprovalError(Exception):
    """Base class for all errors raised by this package."""


class InvalidAuthority(SignedApprovalError, ValueError):
    """The authority address is malformed or the zero address."""


class SignatureError(SignedApprovalError, ValueError):
    """Base class for unusable signature material."""


class MalformedSignature(SignatureError):
    """Signature is not exactly 65 bytes (r || s || v)."""


class InvalidRecoveryId(SignatureError):
    """Recovery byte ``v`` is not one of 0, 1, 27 or 28."""


class RecoveryFailed(SignatureError):
    """No public key can be recovered from the signature."""
