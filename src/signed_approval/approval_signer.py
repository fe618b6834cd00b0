"""Authority-side helper: sign an approval request with a private key.

Key generation and storage are left to the caller; this only turns a key the
caller already holds into a signature the verifier accepts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import to_hex

from .message_hash import ENCODING_ABI, AddressLike, ApprovalRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignedApproval:
    request: ApprovalRequest
    message_hash: bytes
    signature: bytes
    signer: str

    def to_dict(self) -> dict:
        return {
            "recipient": self.request.recipient,
            "asset": self.request.asset,
            "amount": self.request.amount,
            "label": self.request.label,
            "message_hash": to_hex(self.message_hash),
            "signature": to_hex(self.signature),
            "signer": self.signer,
        }


def sign_request(private_key: str, request: ApprovalRequest, encoding: str = ENCODING_ABI) -> SignedApproval:
    # Accept keys with or without 0x prefix
    if isinstance(private_key, str) and not private_key.startswith("0x"):
        private_key = "0x" + private_key
    account = Account.from_key(private_key)

    message_hash = request.message_hash(encoding)
    signed = account.sign_message(encode_defunct(primitive=message_hash))
    logger.debug("Signed %s as %s", to_hex(message_hash), account.address)
    return SignedApproval(
        request=request,
        message_hash=message_hash,
        signature=bytes(signed.signature),
        signer=account.address,
    )


def sign_approval(
    private_key: str,
    recipient: AddressLike,
    asset: AddressLike,
    amount: int,
    label: str,
    encoding: str = ENCODING_ABI,
) -> SignedApproval:
    """Sign ``(recipient, asset, amount, label)`` the way ``personal_sign`` does."""
    return sign_request(private_key, ApprovalRequest(recipient, asset, amount, label), encoding)
