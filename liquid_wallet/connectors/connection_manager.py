"""
Backend for wagmi/RainbowKit-style connection managers.

A connection manager owns several EVM connectors (injected, WalletConnect,
Coinbase...) and exposes the connected account plus typed-data signing. The
app may register a get_evm_accounts callback (typically "open the connect
modal") after the wallet has been built.
"""

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, FrozenSet, List, Optional, Protocol, Union

from ..config import Settings, settings as default_settings
from ..core.wallet.chain_guard import ChainGuardMode
from ..core.wallet.errors import ProviderUnavailableError, UserRejectedError, translate_provider_error
from ..core.wallet.models import ConnectorInfo, NetworkDescriptor, TypedData, WalletState
from ..core.wallet.wallet import ConnectedAccounts
from ..providers.base import EvmProvider


logger = logging.getLogger(__name__)


GetEvmAccounts = Callable[[], Union[List[str], Awaitable[List[str]]]]


class Connector(Protocol):
    name: Optional[str]
    icon: Optional[str]

    async def get_provider(self) -> EvmProvider: ...


@dataclass
class ManagerAccount:
    """Snapshot of the connection manager's account state."""
    address: Optional[str] = None
    addresses: List[str] = field(default_factory=list)
    connector: Optional[Connector] = None
    is_connected: bool = False

    @property
    def all_addresses(self) -> List[str]:
        if self.addresses:
            return list(self.addresses)
        return [self.address] if self.address else []


class ConnectionManager(Protocol):
    chains: List[Dict[str, Any]]
    connectors: List[Connector]

    def get_account(self) -> ManagerAccount: ...

    def register_chain(self, chain: Dict[str, Any]) -> None: ...

    async def connect(self, connector: Connector) -> List[str]: ...

    async def reconnect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def sign_typed_data(
        self,
        *,
        account: str,
        domain: Dict[str, Any],
        types: Dict[str, List[Dict[str, str]]],
        primary_type: str,
        message: Dict[str, Any],
    ) -> str: ...


def chain_config(network: NetworkDescriptor) -> Dict[str, Any]:
    """Connection-manager chain entry for the Algorand network."""
    config: Dict[str, Any] = {
        "id": network.chain_id,
        "name": network.chain_name,
        "nativeCurrency": dict(network.native_currency),
        "rpcUrls": {"default": {"http": list(network.rpc_urls)}},
    }
    if network.block_explorer_urls:
        config["blockExplorers"] = {
            "default": {"name": network.chain_name, "url": network.block_explorer_urls[0]}
        }
    return config


def extract_connector_info(account: Optional[ManagerAccount]) -> ConnectorInfo:
    connector = account.connector if account else None
    name = getattr(connector, "name", None)
    icon = getattr(connector, "icon", None)
    return ConnectorInfo(
        name=name if isinstance(name, str) else None,
        icon=icon if isinstance(icon, str) else None,
    )


class ConnectionManagerBackend:
    # Typed-data signing carries the chain id in the EIP-712 domain
    chain_guard_mode = ChainGuardMode.SOFT
    # Refresh persisted connector name/icon on every resume
    always_refresh_on_resume = True

    def __init__(
        self,
        manager: ConnectionManager,
        get_evm_accounts: Optional[GetEvmAccounts] = None,
        *,
        settings: Optional[Settings] = None,
        name: str = "EVM Wallet",
        icon: Optional[str] = None,
        unregistered_chain_codes: Optional[List[int]] = None,
    ):
        if manager is None:
            raise ProviderUnavailableError("ConnectionManagerBackend requires a connection manager")

        self.manager = manager
        self.name = name
        self.icon = icon
        self.unregistered_chain_codes: FrozenSet[int] = frozenset(unregistered_chain_codes or ())
        self.settings = settings or default_settings
        self._get_evm_accounts = get_evm_accounts

        self.ensure_chain_registered()

    def set_get_evm_accounts(self, fn: GetEvmAccounts) -> None:
        """Install the account-picker callback after construction."""
        self._get_evm_accounts = fn

    def ensure_chain_registered(self) -> None:
        chain_id = self.settings.algorand_evm_chain_id
        if any(chain.get("id") == chain_id for chain in self.manager.chains):
            return

        logger.info(f"Registering Algorand chain ({chain_id}) in connection manager")
        self.manager.register_chain(chain_config(self.settings.network_descriptor()))

    async def initialize_provider(self) -> None:
        logger.info("Using connection manager for EVM provider management")

    async def get_provider(self) -> EvmProvider:
        account = self.manager.get_account()
        if account.connector is None:
            raise ProviderUnavailableError("No EVM wallet connector available")
        return await account.connector.get_provider()

    async def sign_typed_data(self, typed_data: TypedData, evm_address: str) -> str:
        return await self.manager.sign_typed_data(
            account=evm_address,
            domain=typed_data.domain,
            types=typed_data.types_without_domain(),
            primary_type=typed_data.primary_type,
            message=typed_data.message,
        )

    async def request_accounts(self) -> ConnectedAccounts:
        """
        Accounts from the app callback, else the live connection, else the first connector.

        Raises:
            UserRejectedError: The user declined the connection request
            ProviderUnavailableError: Nothing is connected and auto-connect failed
        """
        if self._get_evm_accounts is not None:
            try:
                addresses = self._get_evm_accounts()
                if inspect.isawaitable(addresses):
                    addresses = await addresses
            except Exception as exc:
                translated = self._translate(exc)
                if translated is exc:
                    raise
                raise translated from exc
            if addresses:
                account = self.manager.get_account()
                info = extract_connector_info(account)
                if account.is_connected and account.address:
                    return ConnectedAccounts(account.all_addresses, info)
                return ConnectedAccounts(list(addresses), info)

        account = self.manager.get_account()
        if account.is_connected and account.address:
            return ConnectedAccounts(account.all_addresses, extract_connector_info(account))

        connectors = self.manager.connectors
        if connectors:
            logger.info("Attempting connection with first available connector...")
            try:
                addresses = await self.manager.connect(connectors[0])
                return ConnectedAccounts(
                    list(addresses),
                    extract_connector_info(self.manager.get_account()),
                )
            except Exception as exc:
                translated = self._translate(exc)
                if isinstance(translated, UserRejectedError):
                    raise translated from exc
                logger.warning(f"Auto-connect failed: {exc}")

        raise ProviderUnavailableError("No EVM wallet connected. Please connect an EVM wallet first.")

    def _translate(self, exc: Exception) -> BaseException:
        return translate_provider_error(exc, rejected_code=self.settings.user_rejected_error_code)

    async def current_accounts(self, persisted: WalletState) -> ConnectedAccounts:
        try:
            await self.manager.reconnect()
        except Exception as exc:
            logger.warning(f"Connection manager reconnect error (may be expected): {exc}")

        account = self.manager.get_account()
        if account.is_connected and account.address:
            return ConnectedAccounts(account.all_addresses, extract_connector_info(account))

        logger.warning("EVM wallet not yet connected, resuming from persisted state")
        addresses = [a.evm_address for a in persisted.accounts if a.evm_address]
        return ConnectedAccounts(addresses, ConnectorInfo())

    async def disconnect(self) -> None:
        await self.manager.disconnect()
