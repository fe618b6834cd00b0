import unittest

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys import keys

from signed_approval.eth_message import get_eth_signed_message_hash
from signed_approval.exceptions import InvalidRecoveryId, MalformedSignature, RecoveryFailed
from signed_approval.message_hash import get_message_hash
from signed_approval.signature import (
    SECP256K1_HALF_N,
    SECP256K1_N,
    Secp256k1Recoverer,
    SignatureParts,
    normalize_v,
    recover_signer,
    split_signature,
)

from dev_accounts import OTHER, OTHER_KEY, OWNER, OWNER_KEY, USDC


def _twin(parts: SignatureParts) -> SignatureParts:
    """The other valid signature for the same key and digest: (r, n - s, flipped v)."""
    return SignatureParts(parts.r, SECP256K1_N - parts.s, 55 - parts.v)


class SplitSignatureTests(unittest.TestCase):
    def setUp(self):
        digest = get_message_hash(OTHER, USDC, 999, "Hello")
        self.signed = Account.sign_message(encode_defunct(primitive=digest), private_key=OWNER_KEY)
        self.signature = bytes(self.signed.signature)

    def test_components(self):
        parts = split_signature(self.signature)
        self.assertEqual(parts.r, self.signed.r)
        self.assertEqual(parts.s, self.signed.s)
        self.assertEqual(parts.v, self.signed.v)
        self.assertIn(parts.v, (27, 28))
        self.assertEqual(parts.to_bytes(), self.signature)

    def test_hex_string(self):
        self.assertEqual(split_signature(self.signature.hex()), split_signature(self.signature))
        self.assertEqual(split_signature("0x" + self.signature.hex()), split_signature(self.signature))

    def test_v_zero_one_normalized(self):
        raw = bytearray(self.signature)
        raw[64] = self.signature[64] - 27
        self.assertEqual(split_signature(bytes(raw)), split_signature(self.signature))

    def test_normalize_v(self):
        self.assertEqual(normalize_v(0), 27)
        self.assertEqual(normalize_v(1), 28)
        self.assertEqual(normalize_v(27), 27)
        self.assertEqual(normalize_v(28), 28)
        for bad in (2, 26, 29, 35, 37, 255):
            with self.assertRaises(InvalidRecoveryId):
                normalize_v(bad)

    def test_bad_recovery_byte(self):
        for bad in (2, 29, 37):
            raw = bytearray(self.signature)
            raw[64] = bad
            with self.assertRaises(InvalidRecoveryId):
                split_signature(bytes(raw))

    def test_wrong_length(self):
        for blob in (b"", self.signature[:64], self.signature + b"\x00", b"\x01" * 130):
            with self.assertRaises(MalformedSignature):
                split_signature(blob)

    def test_not_hex(self):
        with self.assertRaises(MalformedSignature):
            split_signature("0xnothex")
        with self.assertRaises(MalformedSignature):
            split_signature(12345)


class RecoverSignerTests(unittest.TestCase):
    def setUp(self):
        self.digest = get_message_hash(OTHER, USDC, 999, "Hello")
        self.eth_hash = get_eth_signed_message_hash(self.digest)
        self.signature = bytes(
            Account.sign_message(encode_defunct(primitive=self.digest), private_key=OWNER_KEY).signature
        )

    def test_recovers_signer(self):
        self.assertEqual(recover_signer(self.eth_hash, self.signature), OWNER)

    def test_recovers_eth_keys_signature_with_v_0_or_1(self):
        sig = keys.PrivateKey(bytes.fromhex(OWNER_KEY[2:])).sign_msg_hash(self.eth_hash)
        raw = sig.to_bytes()
        self.assertIn(raw[64], (0, 1))
        self.assertEqual(recover_signer(self.eth_hash, raw), OWNER)

    def test_distinct_keys_distinct_signers(self):
        other_sig = Account.sign_message(encode_defunct(primitive=self.digest), private_key=OTHER_KEY).signature
        self.assertEqual(recover_signer(self.eth_hash, other_sig), OTHER)
        self.assertNotEqual(OTHER, OWNER)

    def test_raw_digest_recovers_someone_else(self):
        # Signature was made over the wrapped digest, not the raw one. r is a
        # real curve point, so recovery succeeds and yields an unrelated key.
        recovered = recover_signer(self.digest, self.signature)
        self.assertNotEqual(recovered, OWNER)
        self.assertNotEqual(recovered, OTHER)

    def test_zero_components(self):
        parts = split_signature(self.signature)
        for broken in (
            SignatureParts(0, parts.s, parts.v),
            SignatureParts(parts.r, 0, parts.v),
            SignatureParts(SECP256K1_N, parts.s, parts.v),
            SignatureParts(parts.r, SECP256K1_N, parts.v),
        ):
            with self.assertRaises(RecoveryFailed):
                recover_signer(self.eth_hash, broken.to_bytes())

    def test_digest_length(self):
        with self.assertRaises(ValueError):
            recover_signer(self.eth_hash[:31], self.signature)

    def test_malformed_before_recovery(self):
        with self.assertRaises(MalformedSignature):
            recover_signer(self.eth_hash, self.signature[:64])


class RecovererSettingsTests(unittest.TestCase):
    def test_require_low_s_is_read_only(self):
        recoverer = Secp256k1Recoverer()
        with self.assertRaises(AttributeError):
            recoverer.require_low_s = True
        self.assertFalse(recoverer.require_low_s)

    def test_default_recoverer_cannot_be_switched_to_strict(self):
        from signed_approval import SignatureVerifier

        first = SignatureVerifier(OWNER)
        second = SignatureVerifier(OTHER)
        with self.assertRaises(AttributeError):
            first.recoverer.require_low_s = True
        self.assertFalse(second.recoverer.require_low_s)
        self.assertTrue(Secp256k1Recoverer(require_low_s=True).require_low_s)


class LowSTests(unittest.TestCase):
    def setUp(self):
        self.digest = get_message_hash(OTHER, USDC, 1, "low-s")
        self.eth_hash = get_eth_signed_message_hash(self.digest)
        signature = Account.sign_message(encode_defunct(primitive=self.digest), private_key=OWNER_KEY).signature
        parts = split_signature(signature)
        twin = _twin(parts)
        if parts.s <= SECP256K1_HALF_N:
            self.low, self.high = parts, twin
        else:
            self.low, self.high = twin, parts

    def test_malleated_twin_recovers_same_signer(self):
        recoverer = Secp256k1Recoverer()
        self.assertEqual(recover_signer(self.eth_hash, self.low.to_bytes(), recoverer), OWNER)
        self.assertEqual(recover_signer(self.eth_hash, self.high.to_bytes(), recoverer), OWNER)

    def test_strict_rejects_high_s(self):
        strict = Secp256k1Recoverer(require_low_s=True)
        self.assertEqual(recover_signer(self.eth_hash, self.low.to_bytes(), strict), OWNER)
        with self.assertRaises(RecoveryFailed):
            recover_signer(self.eth_hash, self.high.to_bytes(), strict)


if __name__ == "__main__":
    unittest.main()
