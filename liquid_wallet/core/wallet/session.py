"""
Session resume: reconcile persisted accounts with what the connector reports now.
"""

import logging
from typing import Iterable, List, NamedTuple, Optional, Sequence

from .address_bridge import AddressBridge
from .models import Account, ConnectorInfo, WalletState


logger = logging.getLogger(__name__)


class ResumeResult(NamedTuple):
    accounts: List[Account]
    should_persist: bool


def compare_accounts(a: Iterable[Account], b: Iterable[Account]) -> bool:
    """Order-independent address-set equality."""
    return {account.address for account in a} == {account.address for account in b}


def _connector_metadata(accounts: Iterable[Account]) -> dict:
    return {
        account.address: (
            (account.metadata.connector_name, account.metadata.connector_icon)
            if account.metadata
            else (None, None)
        )
        for account in accounts
    }


class SessionReconciler:
    """Decides whether a resumed session must overwrite the persisted accounts."""

    def __init__(self, bridge: AddressBridge, store, wallet_id: str, always_refresh: bool = False):
        self.bridge = bridge
        self.store = store
        self.wallet_id = wallet_id
        self.always_refresh = always_refresh

    async def resume(
        self,
        evm_addresses: Sequence[str],
        persisted: Optional[WalletState],
        *,
        label: str,
        connector_info: Optional[ConnectorInfo] = None,
    ) -> ResumeResult:
        """
        Re-derive accounts for ``evm_addresses`` and compare them with ``persisted``.

        Returns ResumeResult([], False) when there is no persisted session.
        """
        if persisted is None:
            logger.info(f"[{self.wallet_id}] No session to resume")
            return ResumeResult([], False)

        self.bridge.rebuild_from(persisted.accounts)
        accounts = await self.bridge.derive(evm_addresses, label, connector_info)

        if not compare_accounts(accounts, persisted.accounts):
            logger.warning(f"[{self.wallet_id}] Session accounts mismatch, updating accounts")
            return ResumeResult(accounts, True)

        if _connector_metadata(accounts) != _connector_metadata(persisted.accounts):
            logger.info(f"[{self.wallet_id}] Connector metadata changed, refreshing accounts")
            return ResumeResult(accounts, True)

        return ResumeResult(accounts, self.always_refresh)

    def rebuild_from_store(self) -> bool:
        """Rebuild the bridge from persisted account metadata; True when anything was mapped."""
        state = self.store.get_wallet(self.wallet_id)
        if state is None:
            return False
        count = self.bridge.rebuild_from(state.accounts)
        logger.debug(f"[{self.wallet_id}] Rebuilt {count} EVM address mapping(s) from store")
        return count > 0
