"""
Liquid EVM wallet: Algorand accounts controlled by an EVM wallet.

One orchestration type drives every EVM connector. Connectors implement the
small EvmBackend interface (provider lifecycle, account enumeration and
typed-data signing); connect, resume, disconnect and signing are written once
here against that interface.
"""

import inspect
import logging
from dataclasses import dataclass, field, replace
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Collection,
    FrozenSet,
    List,
    Optional,
    Protocol,
    Union,
)

from algosdk.v2client import algod

from ...config import Settings, settings as default_settings
from ...providers.base import EvmProvider
from ...providers.liquid_sdk import LiquidEvmSdk, build_algod_client, load_liquid_sdk
from ...services.address import connected_evm_addresses
from .address_bridge import AddressBridge
from .chain_guard import ChainGuardMode, build_chain_guard
from .errors import NoAccountsFoundError, WalletBusyError
from .hooks import HookResolver, UIHooks
from .lazy import LazyResource
from .models import Account, ConnectorInfo, EvmAccount, TypedData, WalletMetadata, WalletState
from .session import SessionReconciler
from .signing import SigningOrchestrator
from .transactions import TransactionGroup, TransactionGroupProcessor

if TYPE_CHECKING:  # pragma: no cover
    from ...db.store import WalletStore


logger = logging.getLogger(__name__)


@dataclass
class ConnectedAccounts:
    """EVM addresses reported by a connector, with the connector's display info."""
    addresses: List[str] = field(default_factory=list)
    connector_info: ConnectorInfo = field(default_factory=ConnectorInfo)


class EvmBackend(Protocol):
    """Capabilities a concrete EVM connector provides to LiquidEvmWallet."""

    name: str
    icon: Optional[str]
    # Empty means "use settings.unregistered_chain_error_codes"
    unregistered_chain_codes: FrozenSet[int]
    chain_guard_mode: ChainGuardMode
    always_refresh_on_resume: bool

    async def initialize_provider(self) -> None: ...

    async def get_provider(self) -> EvmProvider: ...

    async def sign_typed_data(self, typed_data: TypedData, evm_address: str) -> str: ...

    async def request_accounts(self) -> ConnectedAccounts:
        """Interactive account enumeration for connect()."""
        ...

    async def current_accounts(self, persisted: WalletState) -> ConnectedAccounts:
        """Silent account enumeration for resume_session()."""
        ...

    async def disconnect(self) -> None: ...


SdkFactory = Callable[..., Any]


class LiquidEvmWallet:
    """
    Wallet adapter deriving Algorand accounts from EVM accounts.

    Example usage:
        backend = InjectedWalletBackend(provider=my_provider, name="Rainbow")
        wallet = LiquidEvmWallet("rainbow", backend, store)

        accounts = await wallet.connect()
        signed = await wallet.sign_transactions([txn1, txn2])
    """

    def __init__(
        self,
        wallet_id: str,
        backend: EvmBackend,
        store: "WalletStore",
        *,
        ui_hooks: Optional[UIHooks] = None,
        manager_ui_hooks: Optional[Union[UIHooks, Callable[[], Optional[UIHooks]]]] = None,
        settings: Optional[Settings] = None,
        sdk_factory: Optional[SdkFactory] = None,
        algod_client: Optional[algod.AlgodClient] = None,
    ):
        self.id = wallet_id
        self.backend = backend
        self.store = store
        self.settings = settings or default_settings

        self.default_metadata = WalletMetadata(name=backend.name, icon=backend.icon)
        self.metadata = replace(self.default_metadata)

        self._sdk_factory = sdk_factory
        self._algod = LazyResource(lambda: algod_client or build_algod_client(self.settings), "algod client")
        self._sdk = LazyResource(self._build_sdk, "Liquid EVM SDK")
        self._provider_ready = LazyResource(backend.initialize_provider, f"{backend.name} provider")

        self.hooks = HookResolver(ui_hooks, manager_ui_hooks)
        self.bridge = AddressBridge(self.get_sdk)
        self.reconciler = SessionReconciler(
            self.bridge,
            store,
            wallet_id,
            always_refresh=backend.always_refresh_on_resume,
        )
        self.chain_guard = build_chain_guard(
            backend.chain_guard_mode,
            self.settings.network_descriptor(),
            unregistered_codes=backend.unregistered_chain_codes or self.settings.unregistered_chain_error_codes,
            rejected_code=self.settings.user_rejected_error_code,
        )
        self.signer = SigningOrchestrator(
            TransactionGroupProcessor(),
            self.bridge,
            self.reconciler,
            self.chain_guard,
            self.hooks,
            context=self,
            wallet_id=wallet_id,
        )

        self._connecting = False
        self._signing = False

    # ---- state -------------------------------------------------------------

    @property
    def state(self) -> Optional[WalletState]:
        return self.store.get_wallet(self.id)

    @property
    def accounts(self) -> List[Account]:
        state = self.state
        return list(state.accounts) if state else []

    @property
    def addresses(self) -> List[str]:
        return [account.address for account in self.accounts]

    @property
    def active_account(self) -> Optional[Account]:
        state = self.state
        return state.active_account if state else None

    @property
    def is_connected(self) -> bool:
        return bool(self.accounts)

    @property
    def is_connecting(self) -> bool:
        return self._connecting

    def update_metadata(self, name: Optional[str] = None, icon: Optional[str] = None) -> None:
        if name:
            self.metadata.name = name
        if icon:
            self.metadata.icon = icon

    def reset_metadata(self) -> None:
        self.metadata = replace(self.default_metadata)

    # ---- lazy dependencies -------------------------------------------------

    async def _build_sdk(self) -> LiquidEvmSdk:
        client = await self._algod.get()
        if self._sdk_factory is None:
            return await load_liquid_sdk(self.settings, client)

        sdk = self._sdk_factory(algod=client)
        if inspect.isawaitable(sdk):
            sdk = await sdk
        return sdk

    async def get_sdk(self) -> LiquidEvmSdk:
        return await self._sdk.get()

    async def get_evm_provider(self) -> EvmProvider:
        """EIP-1193 provider of the connected EVM wallet, for arbitrary EVM calls."""
        await self._provider_ready.get()
        return await self.backend.get_provider()

    async def sign_typed_data(self, typed_data: TypedData, evm_address: str) -> str:
        return await self.backend.sign_typed_data(typed_data, evm_address)

    # ---- lifecycle ---------------------------------------------------------

    def _apply_connector_metadata(self, info: ConnectorInfo) -> None:
        if info.is_empty:
            return
        self.update_metadata(name=info.name, icon=info.icon)
        logger.info(f"[{self.id}] Wallet metadata updated: {info.name or '(no name)'}")

    async def connect(self) -> List[Account]:
        """
        Connect the EVM wallet and derive one Algorand account per EVM account.

        A second call while one is running is ignored and returns [].

        Raises:
            NoAccountsFoundError: The connector reported no valid EVM accounts
        """
        if self._connecting:
            logger.info(f"[{self.id}] connect() already in progress, ignoring duplicate call")
            return []
        self._connecting = True

        try:
            logger.info(f"[{self.id}] Connecting...")
            await self._provider_ready.get()
            await self.get_sdk()

            connected = await self.backend.request_accounts()
            evm_addresses = connected_evm_addresses(connected.addresses)
            if not evm_addresses:
                logger.error(f"[{self.id}] No accounts found!")
                raise NoAccountsFoundError()

            logger.info(f"[{self.id}] Connected to {len(evm_addresses)} EVM account(s)")
            self._apply_connector_metadata(connected.connector_info)

            accounts = await self.bridge.derive(evm_addresses, self.metadata.name, connected.connector_info)
            self.store.add_wallet(self.id, WalletState(accounts=accounts, active_account=accounts[0]))

            logger.info(f"[{self.id}] Connected.")
            await self.hooks.notify_connect(EvmAccount(evm_addresses[0], accounts[0].address))
            return accounts
        finally:
            self._connecting = False

    async def disconnect(self) -> None:
        logger.info(f"[{self.id}] Disconnecting...")

        try:
            await self.backend.disconnect()
        except Exception as exc:  # noqa: BLE001
            logger.warning(f"[{self.id}] Backend disconnect error: {exc}")

        self._provider_ready.reset()
        self.bridge.clear()
        self.reset_metadata()
        self.store.remove_wallet(self.id)
        logger.info(f"[{self.id}] Disconnected")

    async def resume_session(self) -> None:
        """
        Restore a persisted session against the accounts the connector reports now.

        Without a persisted session this is a no-op. Any failure leaves the
        wallet disconnected and is re-raised.
        """
        persisted = self.state
        if persisted is None:
            logger.info(f"[{self.id}] No session to resume")
            return

        try:
            logger.info(f"[{self.id}] Resuming session...")
            await self._provider_ready.get()
            await self.get_sdk()

            connected = await self.backend.current_accounts(persisted)
            evm_addresses = connected_evm_addresses(connected.addresses)
            if not evm_addresses:
                logger.error(f"[{self.id}] No accounts found!")
                raise NoAccountsFoundError()

            info = connected.connector_info
            if persisted.accounts and persisted.accounts[0].metadata:
                info = info.merged_with(persisted.accounts[0].metadata.connector_info)
            self._apply_connector_metadata(info)

            result = await self.reconciler.resume(
                evm_addresses,
                persisted,
                label=self.metadata.name,
                connector_info=info,
            )
            if result.should_persist:
                self.store.set_accounts(self.id, result.accounts)

            logger.info(f"[{self.id}] Session resumed")
        except Exception as exc:
            logger.error(f"[{self.id}] Error resuming session: {exc}")
            self.bridge.clear()
            self.reset_metadata()
            self.store.remove_wallet(self.id)
            raise

    # ---- signing -----------------------------------------------------------

    async def sign_transactions(
        self,
        group: TransactionGroup,
        indexes_to_sign: Optional[Collection[int]] = None,
    ) -> List[Optional[bytes]]:
        """
        Sign the transactions of ``group`` this wallet owns.

        Raises:
            WalletBusyError: Another sign_transactions call is still running
        """
        if self._signing:
            raise WalletBusyError(f"[{self.id}] A signing request is already in progress")
        self._signing = True
        try:
            return await self.signer.sign_transactions(group, indexes_to_sign)
        finally:
            self._signing = False

    async def transaction_signer(self, txn_group: TransactionGroup, indexes_to_sign: Collection[int]) -> List[bytes]:
        """algosdk-style signer: only the signed blobs, in index order."""
        signed = await self.sign_transactions(txn_group, indexes_to_sign)
        return [blob for blob in signed if blob is not None]
