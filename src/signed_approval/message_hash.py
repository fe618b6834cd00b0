"""
Request digest builder.

Serializes an approval request ``(recipient, asset, amount, label)`` into the
Solidity ABI layout and hashes it with keccak-256. Two layouts are supported:

``abi``
    ``abi.encode(address, address, uint256, string)``. Every field occupies
    whole 32-byte words and the label carries an explicit length word, so no
    two distinct requests share an encoding. This is the default.

``packed``
    ``abi.encodePacked(address, address, uint256, string)``, the layout most
    deployed ``VerifySignature`` style contracts hash. Kept for compatibility
    with those contracts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from eth_abi import encode
from eth_abi.packed import encode_packed
from eth_utils import keccak, to_hex
from web3 import Web3

logger = logging.getLogger(__name__)

REQUEST_TYPES = ["address", "address", "uint256", "string"]

ENCODING_ABI = "abi"
ENCODING_PACKED = "packed"
ENCODINGS = (ENCODING_ABI, ENCODING_PACKED)

UINT256_MAX = 2**256 - 1

AddressLike = Union[str, bytes, bytearray]


def normalize_address(value: AddressLike, field: str = "address", strict_checksum: bool = False) -> str:
    """Return ``value`` as an EIP-55 checksum address.

    Accepts 0x-prefixed hex strings or 20 raw bytes. All-lowercase and
    all-uppercase hex carry no checksum and are always accepted; with
    ``strict_checksum`` a mixed-case string must pass the EIP-55 check.
    """
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 20:
            raise ValueError(f"{field} must be 20 bytes, got {len(value)}")
        return Web3.to_checksum_address(bytes(value))
    if not isinstance(value, str):
        raise TypeError(f"{field} must be a hex string or bytes, got {type(value).__name__}")
    if not Web3.is_address(value.lower()):
        raise ValueError(f"{field} is not a valid address: {value!r}")
    digits = value[2:] if value[:2] in ("0x", "0X") else value
    mixed_case = digits != digits.lower() and digits != digits.upper()
    if strict_checksum and mixed_case and not Web3.is_checksum_address(value):
        raise ValueError(f"{field} has an invalid EIP-55 checksum: {value!r}")
    return Web3.to_checksum_address(value.lower())


def _check_amount(amount: int) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f"amount must be an int, got {type(amount).__name__}")
    if amount < 0 or amount > UINT256_MAX:
        raise ValueError(f"amount out of uint256 range: {amount}")
    return amount


def _check_label(label: str) -> str:
    if not isinstance(label, str):
        raise TypeError(f"label must be a str, got {type(label).__name__}")
    return label


@dataclass(frozen=True)
class ApprovalRequest:
    """A request the authority approves: pay ``amount`` of ``asset`` to ``recipient``."""

    recipient: str
    asset: str
    amount: int
    label: str

    def __post_init__(self):
        object.__setattr__(self, "recipient", normalize_address(self.recipient, "recipient"))
        object.__setattr__(self, "asset", normalize_address(self.asset, "asset"))
        _check_amount(self.amount)
        _check_label(self.label)

    def as_values(self) -> list:
        return [self.recipient, self.asset, self.amount, self.label]

    def encode(self, encoding: str = ENCODING_ABI) -> bytes:
        """Canonical byte encoding of the request for ``encoding``."""
        if encoding == ENCODING_ABI:
            return encode(REQUEST_TYPES, self.as_values())
        if encoding == ENCODING_PACKED:
            # Only the trailing label is variable-length, so this is unambiguous.
            return encode_packed(REQUEST_TYPES, self.as_values())
        raise ValueError(f"Unknown message encoding {encoding!r}; expected one of {ENCODINGS}")

    def message_hash(self, encoding: str = ENCODING_ABI) -> bytes:
        digest = keccak(self.encode(encoding))
        logger.debug("message hash (%s) for %s: %s", encoding, self, to_hex(digest))
        return digest


def get_message_hash(
    recipient: AddressLike,
    asset: AddressLike,
    amount: int,
    label: str,
    encoding: str = ENCODING_ABI,
) -> bytes:
    """
    Hash an approval request to its 32-byte digest.

    Args:
        recipient: Address that receives the asset
        asset: Token contract address
        amount: Amount in base units (0 <= amount < 2**256)
        label: Free-form text bound into the approval
        encoding: ``"abi"`` (default) or ``"packed"``

    Returns:
        keccak-256 digest of the encoded request
    """
    return ApprovalRequest(recipient, asset, amount, label).message_hash(encoding)
