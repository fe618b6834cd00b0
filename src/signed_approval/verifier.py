"""
Signed approval verifier.

Python counterpart of the on-chain ``VerifySignature`` contract: the
authority signs ``getEthSignedMessageHash(getMessageHash(...))`` off-chain and
anyone can later prove the approval by presenting the request fields and the
signature.

Error policy
 - Unusable signature material (wrong length, bad ``v``, unrecoverable key)
   raises a ``SignatureError`` subclass.
 - A well-formed signature that recovers any address other than the
   authority, e.g. because a request field was altered, returns ``False``.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from eth_utils import to_hex

from .authority import AuthorityRegistry
from .eth_message import get_eth_signed_message_hash
from .message_hash import ENCODING_ABI, ENCODINGS, AddressLike, ApprovalRequest
from .signature import (
    DEFAULT_RECOVERER,
    Recoverer,
    SignatureLike,
    SignatureParts,
    recover_signer,
    split_signature,
)

logger = logging.getLogger(__name__)


class SignatureVerifier:
    """Checks approvals signed by a single authority."""

    def __init__(
        self,
        signer: AddressLike,
        *,
        encoding: str = ENCODING_ABI,
        recoverer: Optional[Recoverer] = None,
    ):
        """Initialize the verifier.

        Args:
            signer: Authority address whose signatures are accepted
            encoding: Request encoding, ``"abi"`` or ``"packed"``
            recoverer: Public-key recovery backend (secp256k1 by default)
        """
        if encoding not in ENCODINGS:
            raise ValueError(f"Unknown message encoding {encoding!r}; expected one of {ENCODINGS}")
        self._authority = AuthorityRegistry(signer)
        self.encoding = encoding
        self.recoverer = recoverer or DEFAULT_RECOVERER
        logger.info("Verifier ready for signer %s (encoding=%s)", self.signer, encoding)

    @property
    def signer(self) -> str:
        return self._authority.current()

    def get_message_hash(self, recipient: AddressLike, asset: AddressLike, amount: int, label: str) -> bytes:
        return ApprovalRequest(recipient, asset, amount, label).message_hash(self.encoding)

    def get_eth_signed_message_hash(self, message_hash: Union[bytes, str]) -> bytes:
        return get_eth_signed_message_hash(message_hash)

    def split_signature(self, signature: SignatureLike) -> SignatureParts:
        return split_signature(signature)

    def recover_signer(self, eth_signed_message_hash: Union[bytes, str], signature: SignatureLike) -> str:
        return recover_signer(eth_signed_message_hash, signature, self.recoverer)

    def verify_request(self, request: ApprovalRequest, signature: SignatureLike) -> bool:
        """True only if the authority signed exactly ``request``."""
        eth_hash = get_eth_signed_message_hash(request.message_hash(self.encoding))
        recovered = self.recover_signer(eth_hash, signature)
        if self._authority.matches(recovered):
            return True
        logger.debug(
            "Signature over %s recovered %s, expected %s",
            to_hex(eth_hash), recovered, self.signer,
        )
        return False

    def verify(
        self,
        recipient: AddressLike,
        asset: AddressLike,
        amount: int,
        label: str,
        signature: SignatureLike,
    ) -> bool:
        """
        Check that the authority approved this exact request.

        Returns:
            True if the recovered signer is the authority, False otherwise

        Raises:
            MalformedSignature, InvalidRecoveryId, RecoveryFailed: the
            signature itself is unusable
        """
        return self.verify_request(ApprovalRequest(recipient, asset, amount, label), signature)
