"""
Backend for EIP-1193 providers handed to the process directly.

This covers injected browser-extension providers (Rainbow, Coinbase, Rabby...)
bridged into Python, JSON-RPC signer endpoints and LocalAccountProvider.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, FrozenSet, Iterable, Optional, Union

from ..config import Settings, settings as default_settings
from ..core.wallet.chain_guard import ChainGuardMode
from ..core.wallet.errors import ProviderUnavailableError, translate_provider_error
from ..core.wallet.models import ConnectorInfo, TypedData, WalletState
from ..core.wallet.wallet import ConnectedAccounts
from ..providers.base import ETH_ACCOUNTS, ETH_REQUEST_ACCOUNTS, ETH_SIGN_TYPED_DATA_V4, EvmProvider


logger = logging.getLogger(__name__)


ProviderFactory = Callable[[], Union[Optional[EvmProvider], Awaitable[Optional[EvmProvider]]]]


class InjectedWalletBackend:
    chain_guard_mode = ChainGuardMode.STRICT
    always_refresh_on_resume = False

    def __init__(
        self,
        provider: Optional[EvmProvider] = None,
        *,
        provider_factory: Optional[ProviderFactory] = None,
        name: str = "EVM Wallet",
        icon: Optional[str] = None,
        unregistered_chain_codes: Optional[Iterable[int]] = None,
        settings: Optional[Settings] = None,
    ):
        if provider is None and provider_factory is None:
            raise ProviderUnavailableError(f"{name} requires a provider or a provider factory")

        self.name = name
        self.icon = icon
        self.unregistered_chain_codes: FrozenSet[int] = frozenset(unregistered_chain_codes or ())
        self._provider = provider
        self._provider_factory = provider_factory
        self.settings = settings or default_settings

    @property
    def connector_info(self) -> ConnectorInfo:
        return ConnectorInfo()

    async def initialize_provider(self) -> None:
        if self._provider is not None:
            return

        logger.info(f"Initializing {self.name} provider...")
        provider = self._create_provider()
        if inspect.isawaitable(provider):
            provider = await provider

        if provider is None:
            raise ProviderUnavailableError(f"{self.name} provider not available")
        self._provider = provider

    def _create_provider(self):
        return self._provider_factory()

    async def get_provider(self) -> EvmProvider:
        if self._provider is None:
            await self.initialize_provider()
        return self._provider

    async def _request(self, method: str, params: Optional[list] = None) -> Any:
        provider = await self.get_provider()
        try:
            return await provider.request(method, params)
        except Exception as exc:
            translated = translate_provider_error(
                exc, rejected_code=self.settings.user_rejected_error_code
            )
            if translated is exc:
                raise
            raise translated from exc

    async def request_accounts(self) -> ConnectedAccounts:
        addresses = await self._request(ETH_REQUEST_ACCOUNTS)
        return ConnectedAccounts(addresses=list(addresses or []), connector_info=self.connector_info)

    async def current_accounts(self, persisted: WalletState) -> ConnectedAccounts:
        addresses = await self._request(ETH_ACCOUNTS)
        return ConnectedAccounts(addresses=list(addresses or []), connector_info=self.connector_info)

    async def sign_typed_data(self, typed_data: TypedData, evm_address: str) -> str:
        provider = await self.get_provider()
        return await provider.request(ETH_SIGN_TYPED_DATA_V4, [evm_address, typed_data.to_json()])

    async def disconnect(self) -> None:
        # Providers built by the factory are fetched again on the next connect
        if self._provider_factory is not None:
            self._provider = None
