"""The single trusted signer, fixed for the lifetime of a verifier."""

from __future__ import annotations

from .exceptions import InvalidAuthority, RecoveryFailed
from .message_hash import AddressLike, normalize_address

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class AuthorityRegistry:
    """Holds exactly one authority address. There is no way to change it."""

    __slots__ = ("_identity",)

    def __init__(self, identity: AddressLike):
        try:
            address = normalize_address(identity, "authority", strict_checksum=True)
        except (TypeError, ValueError) as e:
            raise InvalidAuthority(str(e)) from e
        if address == ZERO_ADDRESS:
            raise InvalidAuthority("Authority cannot be the zero address")
        object.__setattr__(self, "_identity", address)

    def __setattr__(self, name, value):
        raise AttributeError("AuthorityRegistry is immutable")

    def __delattr__(self, name):
        raise AttributeError("AuthorityRegistry is immutable")

    def current(self) -> str:
        return self._identity

    @property
    def signer(self) -> str:
        return self._identity

    def matches(self, address: AddressLike) -> bool:
        """True if ``address`` is the authority, in whatever form a recoverer returns it."""
        try:
            recovered = normalize_address(address, "recovered signer")
        except (TypeError, ValueError) as e:
            raise RecoveryFailed(f"Recoverer returned a non-address: {e}") from e
        return recovered == self._identity

    def __repr__(self) -> str:
        return f"AuthorityRegistry({self._identity})"
