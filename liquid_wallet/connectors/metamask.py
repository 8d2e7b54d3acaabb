import logging
from typing import Any, Dict, Optional

from ..config import Settings
from ..core.wallet.wallet import ConnectedAccounts
from ..providers.base import ETH_ACCOUNTS, WALLET_REQUEST_PERMISSIONS
from .injected import InjectedWalletBackend, ProviderFactory


logger = logging.getLogger(__name__)


class MetaMaskBackend(InjectedWalletBackend):
    """
    MetaMask flavour of the injected backend.

    Connecting asks for wallet_requestPermissions first so MetaMask shows its
    account picker even when the dApp is already authorized; wallets without
    that method fall back to eth_requestAccounts.
    """

    def __init__(
        self,
        provider=None,
        *,
        provider_factory: Optional[ProviderFactory] = None,
        settings: Optional[Settings] = None,
        icon: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(
            provider,
            provider_factory=provider_factory,
            name="MetaMask",
            icon=icon,
            settings=settings,
            **kwargs,
        )

    @property
    def dapp_metadata(self) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {"name": self.settings.dapp_name, "url": self.settings.dapp_url}
        if self.settings.dapp_icon_url:
            metadata["iconUrl"] = self.settings.dapp_icon_url
        return metadata

    def _create_provider(self):
        return self._provider_factory(dapp_metadata=self.dapp_metadata)

    async def request_accounts(self) -> ConnectedAccounts:
        try:
            logger.info("Requesting MetaMask permissions...")
            await self._request(WALLET_REQUEST_PERMISSIONS, [{ETH_ACCOUNTS: {}}])
        except Exception as exc:
            logger.warning(
                f"wallet_requestPermissions not supported, falling back to eth_requestAccounts: {exc}"
            )
        return await super().request_accounts()
