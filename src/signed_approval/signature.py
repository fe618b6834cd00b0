"""
Signature decomposition and signer recovery.

A signature is the 65-byte ``r || s || v`` blob produced by ``personal_sign``
and ``Account.sign_message``. Recovery goes through a ``Recoverer`` so the
curve backend can be swapped without touching hashing or verification.
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional, Protocol, Union

from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError
from eth_utils import to_hex

from .eth_message import as_bytes
from .exceptions import InvalidRecoveryId, MalformedSignature, RecoveryFailed

logger = logging.getLogger(__name__)

SIGNATURE_LENGTH = 65

# secp256k1 group order
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N = SECP256K1_N // 2

SignatureLike = Union[bytes, bytearray, str]


class SignatureParts(NamedTuple):
    r: int
    s: int
    v: int

    def to_bytes(self) -> bytes:
        return self.r.to_bytes(32, "big") + self.s.to_bytes(32, "big") + bytes([self.v])


def normalize_v(v: int) -> int:
    """Map the recovery byte to the 27/28 convention."""
    if v in (0, 1):
        return v + 27
    if v in (27, 28):
        return v
    raise InvalidRecoveryId(f"Invalid recovery id v={v}; expected 0, 1, 27 or 28")


def split_signature(signature: SignatureLike) -> SignatureParts:
    """
    Split a 65-byte signature into ``(r, s, v)``.

    Args:
        signature: Raw bytes or 0x-prefixed hex string

    Returns:
        SignatureParts with ``v`` normalized to 27 or 28

    Raises:
        MalformedSignature: signature is not valid hex or not 65 bytes long
        InvalidRecoveryId: ``v`` is outside {0, 1, 27, 28}
    """
    if not isinstance(signature, (bytes, bytearray, str)):
        raise MalformedSignature(f"Signature must be bytes or hex, got {type(signature).__name__}")
    try:
        raw = as_bytes(signature)
    except ValueError as e:
        raise MalformedSignature(f"Signature is not valid hex: {e}") from e

    if len(raw) != SIGNATURE_LENGTH:
        raise MalformedSignature(
            f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(raw)}"
        )

    r = int.from_bytes(raw[0:32], "big")
    s = int.from_bytes(raw[32:64], "big")
    v = normalize_v(raw[64])
    return SignatureParts(r, s, v)


class Recoverer(Protocol):
    """Anything that maps ``(digest, signature parts)`` to a signer address."""

    def recover(self, digest: bytes, parts: SignatureParts) -> str:
        ...


class Secp256k1Recoverer:
    """ECDSA public-key recovery on secp256k1 via ``eth_keys``.

    With ``require_low_s`` set, signatures whose ``s`` lies in the upper half
    of the curve order are rejected (EIP-2), so a signature and its
    malleated twin cannot both be accepted.
    """

    __slots__ = ("_require_low_s",)

    def __init__(self, require_low_s: bool = False):
        self._require_low_s = bool(require_low_s)

    @property
    def require_low_s(self) -> bool:
        return self._require_low_s

    def recover(self, digest: bytes, parts: SignatureParts) -> str:
        r, s, v = parts
        if not 0 < r < SECP256K1_N:
            raise RecoveryFailed("Signature r is out of range")
        if not 0 < s < SECP256K1_N:
            raise RecoveryFailed("Signature s is out of range")
        if self.require_low_s and s > SECP256K1_HALF_N:
            raise RecoveryFailed("Signature s is not in the lower half of the curve order")

        try:
            sig = keys.Signature(vrs=(normalize_v(v) - 27, r, s))
            public_key = keys.ecdsa_recover(digest, sig)
        except (BadSignature, ValidationError) as e:
            raise RecoveryFailed(f"Could not recover public key: {e}") from e

        return public_key.to_checksum_address()


DEFAULT_RECOVERER = Secp256k1Recoverer()


def recover_signer(
    domain_digest: Union[bytes, str],
    signature: SignatureLike,
    recoverer: Optional[Recoverer] = None,
) -> str:
    """
    Recover the address that signed ``domain_digest``.

    ``domain_digest`` is the already-wrapped hash (see
    ``get_eth_signed_message_hash``), not the raw request digest.
    """
    digest = as_bytes(domain_digest)
    if len(digest) != 32:
        raise ValueError(f"Digest must be 32 bytes, got {len(digest)}")

    parts = split_signature(signature)
    signer = (recoverer or DEFAULT_RECOVERER).recover(digest, parts)
    logger.debug("recovered %s from digest %s", signer, to_hex(digest))
    return signer
