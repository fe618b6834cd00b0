#!/usr/bin/env python3
"""
signed-approval command line.

Usage
  signed-approval [--env-file .env] hash --recipient 0x.. --asset 0x.. --amount 999 --label Hello
  signed-approval eth-hash --digest 0x..
  signed-approval recover --digest 0x.. --signature 0x..
  signed-approval inspect --signature 0x..
  signed-approval sign --recipient .. --asset .. --amount .. --label .. [--private-key 0x..]
  signed-approval verify --recipient .. --asset .. --amount .. --label .. --signature 0x.. [--signer 0x..]

Exit codes for ``verify``: 0 valid, 1 invalid, 2 malformed signature, 3 bad input.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from eth_utils import to_hex
from tabulate import tabulate

from .approval_signer import sign_approval
from .config import VerifierSettings, build_verifier, load_env, require_env
from .eth_message import get_eth_signed_message_hash
from .exceptions import SignatureError
from .message_hash import ENCODINGS, get_message_hash
from .signature import SECP256K1_HALF_N, Secp256k1Recoverer, recover_signer, split_signature

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_MALFORMED = 2
EXIT_BAD_INPUT = 3


def _encoding(args: argparse.Namespace, settings: VerifierSettings) -> str:
    return args.encoding or settings.encoding


def cmd_hash(args: argparse.Namespace, settings: VerifierSettings) -> int:
    try:
        digest = get_message_hash(args.recipient, args.asset, args.amount, args.label, _encoding(args, settings))
    except (TypeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT
    print(to_hex(digest))
    return EXIT_OK


def cmd_eth_hash(args: argparse.Namespace, settings: VerifierSettings) -> int:
    try:
        print(to_hex(get_eth_signed_message_hash(args.digest)))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT
    return EXIT_OK


def cmd_recover(args: argparse.Namespace, settings: VerifierSettings) -> int:
    recoverer = Secp256k1Recoverer(require_low_s=settings.require_low_s)
    try:
        print(recover_signer(args.digest, args.signature, recoverer))
    except SignatureError as e:
        print(f"Malformed signature: {e}", file=sys.stderr)
        return EXIT_MALFORMED
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT
    return EXIT_OK


def cmd_inspect(args: argparse.Namespace, settings: VerifierSettings) -> int:
    try:
        parts = split_signature(args.signature)
    except SignatureError as e:
        print(f"Malformed signature: {e}", file=sys.stderr)
        return EXIT_MALFORMED
    rows = [
        ["r", "0x" + parts.r.to_bytes(32, "big").hex()],
        ["s", "0x" + parts.s.to_bytes(32, "big").hex()],
        ["v", parts.v],
        ["low-s", "yes" if parts.s <= SECP256K1_HALF_N else "no"],
    ]
    print(tabulate(rows, headers=["Field", "Value"], tablefmt="simple"))
    return EXIT_OK


def cmd_sign(args: argparse.Namespace, settings: VerifierSettings) -> int:
    private_key = args.private_key or require_env("PRIVATE_KEY")
    try:
        signed = sign_approval(
            private_key, args.recipient, args.asset, args.amount, args.label, _encoding(args, settings)
        )
    except (TypeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT
    print(json.dumps(signed.to_dict(), indent=2))
    return EXIT_OK


def cmd_verify(args: argparse.Namespace, settings: VerifierSettings) -> int:
    if args.encoding:
        settings = VerifierSettings(
            signer=settings.signer,
            encoding=args.encoding,
            require_low_s=settings.require_low_s,
            log_level=settings.log_level,
        )
    try:
        verifier = build_verifier(settings, args.signer)
        ok = verifier.verify(args.recipient, args.asset, args.amount, args.label, args.signature)
    except SignatureError as e:
        print(f"Malformed signature: {e}", file=sys.stderr)
        return EXIT_MALFORMED
    except (TypeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT

    if ok:
        print("valid")
        return EXIT_OK
    print("invalid")
    return EXIT_INVALID


def _add_request_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--recipient", required=True, help="Recipient address")
    p.add_argument("--asset", required=True, help="Token address")
    p.add_argument("--amount", required=True, type=lambda x: int(x, 0), help="Amount in base units (decimal or 0x-hex)")
    p.add_argument("--label", required=True, help="Label bound into the approval")
    p.add_argument("--encoding", choices=ENCODINGS, default=None, help="Request encoding (default from APPROVAL_MESSAGE_ENCODING or abi)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="signed-approval", description="Sign and verify single-signer approvals")
    parser.add_argument("--env-file", help="Path to .env file to load before resolving env vars")
    sub = parser.add_subparsers(dest="cmd")

    p_hash = sub.add_parser("hash", help="Compute the request digest")
    _add_request_args(p_hash)
    p_hash.set_defaults(func=cmd_hash)

    p_eth = sub.add_parser("eth-hash", help="Wrap a digest in the Ethereum signed-message prefix")
    p_eth.add_argument("--digest", required=True, help="0x-hex request digest")
    p_eth.set_defaults(func=cmd_eth_hash)

    p_recover = sub.add_parser("recover", help="Recover the signer of an eth-signed message hash")
    p_recover.add_argument("--digest", required=True, help="0x-hex eth-signed message hash")
    p_recover.add_argument("--signature", required=True, help="0x-hex 65-byte signature")
    p_recover.set_defaults(func=cmd_recover)

    p_inspect = sub.add_parser("inspect", help="Show r, s and v of a signature")
    p_inspect.add_argument("--signature", required=True, help="0x-hex 65-byte signature")
    p_inspect.set_defaults(func=cmd_inspect)

    p_sign = sub.add_parser("sign", help="Sign a request with a private key")
    _add_request_args(p_sign)
    p_sign.add_argument("--private-key", help="0x-hex private key (default PRIVATE_KEY env var)")
    p_sign.set_defaults(func=cmd_sign)

    p_verify = sub.add_parser("verify", help="Verify a signed request against the authority")
    _add_request_args(p_verify)
    p_verify.add_argument("--signature", required=True, help="0x-hex 65-byte signature")
    p_verify.add_argument("--signer", help="Authority address (default APPROVAL_SIGNER_ADDRESS)")
    p_verify.set_defaults(func=cmd_verify)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return EXIT_BAD_INPUT

    load_env(args.env_file)
    try:
        settings = VerifierSettings.from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug("Running %s", args.cmd)
    return args.func(args, settings)


if __name__ == "__main__":
    sys.exit(main())
