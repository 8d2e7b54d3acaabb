"""
EVM → Algorand address derivation with a reverse lookup map.

The map (Algorand address → EVM address) is owned by one wallet instance and
only changes through derive, rebuild_from and clear.
"""

import logging
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Sequence

from ...providers.liquid_sdk import LiquidEvmSdk
from ...services.address import is_valid_algorand_address
from .errors import WalletError
from .models import Account, AccountMetadata, ConnectorInfo


logger = logging.getLogger(__name__)


class AddressBridge:
    def __init__(self, sdk_loader: Callable[[], Awaitable[LiquidEvmSdk]]):
        self._sdk_loader = sdk_loader
        self._evm_address_map: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._evm_address_map)

    def __contains__(self, algorand_address: object) -> bool:
        return algorand_address in self._evm_address_map

    async def derive(
        self,
        evm_addresses: Sequence[str],
        label: str,
        connector_info: Optional[ConnectorInfo] = None,
    ) -> List[Account]:
        """
        Derive one Algorand account per EVM address, in input order.

        Args:
            evm_addresses: EVM addresses reported by the connector
            label: Wallet name used as the account name prefix
            connector_info: Connector name/icon stored in account metadata

        Returns:
            Accounts carrying the EVM address in their metadata

        Raises:
            Whatever the SDK raises; the map is left untouched in that case.
        """
        sdk = await self._sdk_loader()
        info = connector_info or ConnectorInfo()

        derived: Dict[str, str] = {}
        accounts: List[Account] = []
        for evm_address in evm_addresses:
            algorand_address = await sdk.get_address(evm_address)
            if not is_valid_algorand_address(algorand_address):
                raise WalletError(
                    f"Derivation returned an invalid Algorand address for {evm_address}: {algorand_address!r}"
                )

            derived[algorand_address] = evm_address
            accounts.append(
                Account(
                    name=f"{label} {evm_address}",
                    address=algorand_address,
                    metadata=AccountMetadata(
                        evm_address=evm_address,
                        connector_name=info.name,
                        connector_icon=info.icon,
                    ),
                )
            )

        self._evm_address_map.update(derived)
        logger.debug(f"Derived {len(accounts)} Algorand account(s)")
        return accounts

    def reverse_lookup(self, algorand_address: str) -> Optional[str]:
        return self._evm_address_map.get(algorand_address)

    def rebuild_from(self, accounts: Iterable[Account]) -> int:
        """Replace the map with the pairs recorded in persisted account metadata."""
        rebuilt: Dict[str, str] = {}
        for account in accounts:
            if account.evm_address:
                rebuilt[account.address] = account.evm_address
        self._evm_address_map = rebuilt
        return len(rebuilt)

    def clear(self) -> None:
        self._evm_address_map.clear()
