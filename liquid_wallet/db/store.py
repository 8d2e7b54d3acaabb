"""
Process-wide wallet session store.

Holds one WalletState per wallet id plus the active wallet id. State lives in
memory and is optionally mirrored to a JSON file so sessions survive restarts.
Wallets only touch it through the mutation methods below.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..config import settings
from ..core.wallet.models import Account, WalletState


logger = logging.getLogger(__name__)


Listener = Callable[[Dict[str, WalletState]], Any]


class WalletStoreError(Exception):
    """The persisted store file cannot be read or written."""
    pass


class WalletStore:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else None
        self._wallets: Dict[str, WalletState] = {}
        self._active_wallet: Optional[str] = None
        self._listeners: List[Listener] = []

        if self.path and self.path.exists():
            self.load()

    @property
    def active_wallet(self) -> Optional[str]:
        return self._active_wallet

    @property
    def wallets(self) -> Dict[str, WalletState]:
        return dict(self._wallets)

    def get_wallet(self, wallet_id: str) -> Optional[WalletState]:
        return self._wallets.get(wallet_id)

    def add_wallet(self, wallet_id: str, state: WalletState) -> None:
        """Record a connected wallet and make it the active one."""
        active = state.active_account or (state.accounts[0] if state.accounts else None)
        self._wallets[wallet_id] = WalletState(accounts=list(state.accounts), active_account=active)
        self._active_wallet = wallet_id
        self._commit()

    def set_accounts(self, wallet_id: str, accounts: List[Account]) -> None:
        """Replace a wallet's accounts, keeping the active account when it is still present."""
        state = self._wallets.get(wallet_id)
        if state is None:
            logger.warning(f"set_accounts called for unknown wallet {wallet_id}")
            return

        active = state.active_account
        if active is None or active.address not in {a.address for a in accounts}:
            active = accounts[0] if accounts else None
        else:
            active = next(a for a in accounts if a.address == active.address)

        self._wallets[wallet_id] = WalletState(accounts=list(accounts), active_account=active)
        self._commit()

    def set_active_account(self, wallet_id: str, address: str) -> None:
        state = self._wallets.get(wallet_id)
        if state is None:
            raise KeyError(wallet_id)

        account = next((a for a in state.accounts if a.address == address), None)
        if account is None:
            raise ValueError(f"Account {address} is not connected to {wallet_id}")

        state.active_account = account
        self._commit()

    def set_active_wallet(self, wallet_id: Optional[str]) -> None:
        if wallet_id is not None and wallet_id not in self._wallets:
            raise KeyError(wallet_id)
        self._active_wallet = wallet_id
        self._commit()

    def remove_wallet(self, wallet_id: str) -> None:
        if wallet_id not in self._wallets:
            return
        del self._wallets[wallet_id]
        if self._active_wallet == wallet_id:
            self._active_wallet = None
        self._commit()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with a snapshot after every mutation; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wallets": {wallet_id: state.to_dict() for wallet_id, state in self._wallets.items()},
            "activeWallet": self._active_wallet,
        }

    def load(self) -> None:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise WalletStoreError(f"Cannot read wallet store {self.path}: {exc}") from exc

        self._wallets = {
            wallet_id: WalletState.from_dict(state)
            for wallet_id, state in (data.get("wallets") or {}).items()
        }
        active = data.get("activeWallet")
        self._active_wallet = active if active in self._wallets else None
        logger.debug(f"Loaded {len(self._wallets)} wallet session(s) from {self.path}")

    def save(self) -> None:
        if not self.path:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        except OSError as exc:
            raise WalletStoreError(f"Cannot write wallet store {self.path}: {exc}") from exc

    def _commit(self) -> None:
        self.save()
        snapshot = self.wallets
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as exc:  # noqa: BLE001
                logger.warning(f"Wallet store listener failed: {exc}")


_wallet_store: Optional[WalletStore] = None


def get_wallet_store() -> WalletStore:
    """Get the singleton wallet store configured from settings."""
    global _wallet_store
    if _wallet_store is None:
        _wallet_store = WalletStore(settings.store_path)
    return _wallet_store
