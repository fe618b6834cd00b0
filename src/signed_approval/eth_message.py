"""EIP-191 ``personal_sign`` wrapping of request digests."""

from typing import Union

from eth_utils import keccak, to_bytes

ETH_SIGNED_MESSAGE_PREFIX = b"\x19Ethereum Signed Message:\n"


def as_bytes(value: Union[bytes, bytearray, str]) -> bytes:
    """Bytes as-is, strings as 0x-prefixed hex."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return to_bytes(hexstr=value)


def get_eth_signed_message_hash(digest: Union[bytes, str]) -> bytes:
    """
    Return the digest wallets actually sign for ``digest``.

    ``keccak256("\\x19Ethereum Signed Message:\\n" + len(digest) + digest)``,
    the same value ``Account.sign_message(encode_defunct(primitive=digest))``
    signs over.
    """
    payload = as_bytes(digest)
    return keccak(ETH_SIGNED_MESSAGE_PREFIX + str(len(payload)).encode("ascii") + payload)
