"""
Liquid EVM Wallet Module

Lets an EVM wallet (MetaMask, Rainbow, any EIP-1193 provider or wagmi-style
connection manager) control Algorand accounts:
- AddressBridge: Derive Algorand addresses from EVM addresses and map them back
- ChainGuard: Keep the EVM wallet on the Algorand network before signing
- TransactionGroupProcessor: Normalize groups and pick the entries to sign
- SigningOrchestrator: One EIP-712 prompt for a whole transaction group
- SessionReconciler: Restore persisted sessions against live connector state

Usage:
    from liquid_wallet.core.wallet import LiquidEvmWallet, UIHooks
    from liquid_wallet.connectors.injected import InjectedWalletBackend
    from liquid_wallet.db.store import get_wallet_store

    wallet = LiquidEvmWallet(
        "rainbow",
        InjectedWalletBackend(provider=provider, name="Rainbow"),
        get_wallet_store(),
        ui_hooks=UIHooks(on_connect=lambda account: print(account.algorand_address)),
    )

    accounts = await wallet.connect()

    # Signed blobs for the entries this wallet owns, None elsewhere
    signed = await wallet.sign_transactions([payment_txn, app_call_txn])
"""

from .errors import (
    ErrorKind,
    WalletError,
    ProviderRpcError,
    UserRejectedError,
    NetworkUnregisteredError,
    NoSourceAddressError,
    NoAccountsFoundError,
    ProviderUnavailableError,
    MultipleSignersError,
    WalletBusyError,
    InvalidTransactionGroupError,
    translate_provider_error,
)
from .models import (
    Account,
    AccountMetadata,
    ConnectorInfo,
    EvmAccount,
    NetworkDescriptor,
    TypedData,
    WalletMetadata,
    WalletState,
)
from .hooks import HookResolver, UIHooks
from .lazy import LazyResource
from .address_bridge import AddressBridge
from .chain_guard import (
    ChainGuard,
    ChainGuardMode,
    NoopChainGuard,
    SoftChainGuard,
    build_chain_guard,
)
from .transactions import (
    DecodedTransaction,
    EncodedGroup,
    SigningBatch,
    StructuredGroup,
    TransactionEntry,
    TransactionGroupProcessor,
    decode_transaction,
    encode_unsigned,
    flatten_group,
)
from .session import ResumeResult, SessionReconciler, compare_accounts
from .signing import SigningOrchestrator
from .wallet import ConnectedAccounts, EvmBackend, LiquidEvmWallet
from .manager import WalletManager

__all__ = [
    # Errors
    "ErrorKind",
    "WalletError",
    "ProviderRpcError",
    "UserRejectedError",
    "NetworkUnregisteredError",
    "NoSourceAddressError",
    "NoAccountsFoundError",
    "ProviderUnavailableError",
    "MultipleSignersError",
    "WalletBusyError",
    "InvalidTransactionGroupError",
    "translate_provider_error",
    # Models
    "Account",
    "AccountMetadata",
    "ConnectorInfo",
    "EvmAccount",
    "NetworkDescriptor",
    "TypedData",
    "WalletMetadata",
    "WalletState",
    # Components
    "HookResolver",
    "UIHooks",
    "LazyResource",
    "AddressBridge",
    "ChainGuard",
    "ChainGuardMode",
    "NoopChainGuard",
    "SoftChainGuard",
    "build_chain_guard",
    "DecodedTransaction",
    "EncodedGroup",
    "SigningBatch",
    "StructuredGroup",
    "TransactionEntry",
    "TransactionGroupProcessor",
    "decode_transaction",
    "encode_unsigned",
    "flatten_group",
    "ResumeResult",
    "SessionReconciler",
    "compare_accounts",
    "SigningOrchestrator",
    # Wallet
    "ConnectedAccounts",
    "EvmBackend",
    "LiquidEvmWallet",
    "WalletManager",
]
