"""
Environment configuration for the command line.

Variables (optionally loaded from .env files)
  APPROVAL_SIGNER_ADDRESS     authority address accepted by ``verify``
  APPROVAL_MESSAGE_ENCODING   ``abi`` (default) or ``packed``
  APPROVAL_REQUIRE_LOW_S      reject high-s signatures when truthy
  PRIVATE_KEY                 key used by ``sign``
  LOG_LEVEL                   logging level name (default WARNING)

The library itself never reads the environment; only the CLI goes through here.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .message_hash import ENCODING_ABI, ENCODINGS
from .signature import Secp256k1Recoverer
from .verifier import SignatureVerifier

TRUTHY = {"1", "true", "yes", "on"}


def load_env(env_file: Optional[str]) -> None:
    # Base .env first, then the explicit file on top of it
    base_env = Path(".env")
    if base_env.exists():
        load_dotenv(base_env)
    if env_file:
        load_dotenv(env_file, override=True)


def require_env(name: str) -> str:
    v = os.getenv(name)
    if not v:
        raise SystemExit(f"Missing env var: {name}")
    return v


@dataclass(frozen=True)
class VerifierSettings:
    signer: Optional[str] = None
    encoding: str = ENCODING_ABI
    require_low_s: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "VerifierSettings":
        encoding = (os.getenv("APPROVAL_MESSAGE_ENCODING") or ENCODING_ABI).strip().lower()
        if encoding not in ENCODINGS:
            raise ValueError(f"APPROVAL_MESSAGE_ENCODING must be one of {ENCODINGS}, got {encoding!r}")
        return cls(
            signer=os.getenv("APPROVAL_SIGNER_ADDRESS") or None,
            encoding=encoding,
            require_low_s=os.getenv("APPROVAL_REQUIRE_LOW_S", "").strip().lower() in TRUTHY,
            log_level=(os.getenv("LOG_LEVEL") or "WARNING").upper(),
        )


def build_verifier(settings: VerifierSettings, signer: Optional[str] = None) -> SignatureVerifier:
    """Construct a verifier; an explicit ``signer`` overrides the settings."""
    authority = signer or settings.signer
    if not authority:
        raise SystemExit("Missing signer: pass --signer or set APPROVAL_SIGNER_ADDRESS")
    return SignatureVerifier(
        authority,
        encoding=settings.encoding,
        recoverer=Secp256k1Recoverer(require_low_s=settings.require_low_s),
    )
