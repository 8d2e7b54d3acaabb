"""
Error taxonomy for the EVM → Algorand signing bridge.

Every error raised to callers derives from WalletError and carries a stable
ErrorKind so UIs can branch on the kind rather than on message text.
"""

from enum import Enum
from typing import Any, Iterable, Optional, Set


class ErrorKind(str, Enum):
    """Stable error kinds surfaced to callers."""

    USER_REJECTED = "user_rejected"
    NETWORK_UNREGISTERED = "network_unregistered"
    NO_SOURCE_ADDRESS = "no_source_address"
    NO_ACCOUNTS = "no_accounts"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    PROVIDER_RPC = "provider_rpc"
    MULTIPLE_SIGNERS = "multiple_signers"
    BUSY = "busy"
    INVALID_GROUP = "invalid_group"
    UNKNOWN = "unknown"


class WalletError(Exception):
    """Base exception for wallet errors."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ProviderRpcError(WalletError):
    """An EVM provider rejected a request (EIP-1193 / JSON-RPC error object)."""

    kind = ErrorKind.PROVIDER_RPC

    def __init__(self, code: Optional[int], message: str, data: Any = None):
        super().__init__(message)
        self.code = code
        self.data = data

    def __str__(self) -> str:
        return f"{self.message} (code {self.code})" if self.code is not None else self.message


class UserRejectedError(WalletError):
    """The user declined the request in their wallet."""

    kind = ErrorKind.USER_REJECTED

    def __init__(self, message: str = "User rejected the signing request"):
        super().__init__(message)


class NetworkUnregisteredError(WalletError):
    """The wallet does not know the requested chain."""

    kind = ErrorKind.NETWORK_UNREGISTERED

    def __init__(self, chain_id: str, code: Optional[int] = None):
        super().__init__(f"Chain {chain_id} is not registered in the wallet")
        self.chain_id = chain_id
        self.code = code


class NoSourceAddressError(WalletError):
    """No EVM address is mapped to an Algorand address."""

    kind = ErrorKind.NO_SOURCE_ADDRESS

    def __init__(self, algorand_address: str):
        super().__init__(f"No EVM address found for Algorand address: {algorand_address}")
        self.algorand_address = algorand_address


class NoAccountsFoundError(WalletError):
    """The connector reported zero EVM accounts."""

    kind = ErrorKind.NO_ACCOUNTS

    def __init__(self, message: str = "No accounts found!"):
        super().__init__(message)


class ProviderUnavailableError(WalletError):
    """No usable EVM provider or connector."""

    kind = ErrorKind.PROVIDER_UNAVAILABLE


class MultipleSignersError(WalletError):
    """The eligible transactions belong to more than one EVM signer."""

    kind = ErrorKind.MULTIPLE_SIGNERS

    def __init__(self, evm_addresses: Iterable[str]):
        self.evm_addresses = sorted(set(evm_addresses))
        super().__init__(
            "Transactions to sign belong to more than one EVM account: "
            + ", ".join(self.evm_addresses)
        )


class WalletBusyError(WalletError):
    """Another signing request is already running on this wallet."""

    kind = ErrorKind.BUSY


class InvalidTransactionGroupError(WalletError, ValueError):
    """The transaction group has an unsupported shape."""

    kind = ErrorKind.INVALID_GROUP


def provider_error_codes(exc: BaseException) -> Set[int]:
    """Collect the top-level and nested (data.originalError.code) error codes."""

    codes: Set[int] = set()
    code = getattr(exc, "code", None)
    if isinstance(code, int):
        codes.add(code)

    data = getattr(exc, "data", None)
    if isinstance(data, dict):
        original = data.get("originalError")
        if isinstance(original, dict) and isinstance(original.get("code"), int):
            codes.add(original["code"])
    return codes


def translate_provider_error(
    exc: BaseException,
    *,
    rejected_code: int = 4001,
    unregistered_codes: Optional[Iterable[int]] = None,
    chain_id: str = "",
) -> BaseException:
    """Map a raw provider failure onto the wallet error taxonomy.

    Returns the exception to raise; errors that are already WalletErrors of a
    specific kind, or that carry no recognised code, are returned unchanged.
    """
    if isinstance(exc, WalletError) and not isinstance(exc, ProviderRpcError):
        return exc

    codes = provider_error_codes(exc)
    if rejected_code in codes:
        return UserRejectedError()
    if unregistered_codes:
        matched = codes & set(unregistered_codes)
        if matched:
            return NetworkUnregisteredError(chain_id, code=min(matched))
    return exc
