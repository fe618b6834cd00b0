"""
Single-signer approval verification.

An authority signs ``(recipient, asset, amount, label)`` off-chain; anyone
holding the signature can later have it checked with ``SignatureVerifier``.
"""

from .approval_signer import SignedApproval, sign_approval, sign_request
from .authority import AuthorityRegistry
from .eth_message import get_eth_signed_message_hash
from .exceptions import (
    InvalidAuthority,
    InvalidRecoveryId,
    MalformedSignature,
    RecoveryFailed,
    SignatureError,
    SignedApprovalError,
)
from .message_hash import ApprovalRequest, get_message_hash
from .signature import Recoverer, Secp256k1Recoverer, SignatureParts, recover_signer, split_signature
from .verifier import SignatureVerifier

__all__ = [
    "ApprovalRequest",
    "AuthorityRegistry",
    "InvalidAuthority",
    "InvalidRecoveryId",
    "MalformedSignature",
    "Recoverer",
    "RecoveryFailed",
    "Secp256k1Recoverer",
    "SignatureError",
    "SignatureParts",
    "SignatureVerifier",
    "SignedApproval",
    "SignedApprovalError",
    "get_eth_signed_message_hash",
    "get_message_hash",
    "recover_signer",
    "sign_approval",
    "sign_request",
    "split_signature",
]
