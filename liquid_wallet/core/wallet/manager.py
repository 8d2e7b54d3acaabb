"""Registry of wallets sharing one store and one set of manager-level UI hooks."""

import logging
from typing import TYPE_CHECKING, Dict, List, Optional

from ...config import Settings
from .hooks import UIHooks
from .wallet import EvmBackend, LiquidEvmWallet

if TYPE_CHECKING:  # pragma: no cover
    from ...db.store import WalletStore


logger = logging.getLogger(__name__)


class WalletManager:
    def __init__(
        self,
        store: Optional["WalletStore"] = None,
        ui_hooks: Optional[UIHooks] = None,
        settings: Optional[Settings] = None,
    ):
        if store is None:
            from ...db.store import get_wallet_store
            store = get_wallet_store()

        self.store = store
        self.ui_hooks = ui_hooks
        self.settings = settings
        self._wallets: Dict[str, LiquidEvmWallet] = {}

    @property
    def wallets(self) -> List[LiquidEvmWallet]:
        return list(self._wallets.values())

    def add_wallet(self, wallet_id: str, backend: EvmBackend, **kwargs) -> LiquidEvmWallet:
        """Create and register a wallet; manager hooks act as the fallback for its hooks."""
        if wallet_id in self._wallets:
            raise ValueError(f"Wallet {wallet_id} is already registered")

        kwargs.setdefault("settings", self.settings)
        wallet = LiquidEvmWallet(
            wallet_id,
            backend,
            self.store,
            manager_ui_hooks=lambda: self.ui_hooks,
            **kwargs,
        )
        self._wallets[wallet_id] = wallet
        return wallet

    def get_wallet(self, wallet_id: str) -> Optional[LiquidEvmWallet]:
        return self._wallets.get(wallet_id)

    @property
    def active_wallet(self) -> Optional[LiquidEvmWallet]:
        active_id = self.store.active_wallet
        return self._wallets.get(active_id) if active_id else None

    async def resume_sessions(self) -> Dict[str, bool]:
        """Resume every registered wallet in turn; a failure only disconnects that wallet."""
        results: Dict[str, bool] = {}
        for wallet_id, wallet in self._wallets.items():
            try:
                await wallet.resume_session()
                results[wallet_id] = wallet.is_connected
            except Exception as exc:
                logger.error(f"Failed to resume {wallet_id}: {exc}")
                results[wallet_id] = False
        return results
