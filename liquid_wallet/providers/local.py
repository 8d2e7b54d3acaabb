"""
In-process EIP-1193 provider backed by eth_account keys.

Behaves like a browser wallet for the methods the bridge uses: it tracks the
current chain, knows which chains were added, and can simulate the user
rejecting signature prompts.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from eth_account import Account as EthAccount
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from eth_utils import to_hex

from ..core.wallet.errors import ProviderRpcError
from .base import (
    ETH_ACCOUNTS,
    ETH_CHAIN_ID,
    ETH_REQUEST_ACCOUNTS,
    ETH_SIGN_TYPED_DATA_V4,
    PERSONAL_SIGN,
    UNAUTHORIZED,
    UNRECOGNIZED_CHAIN,
    UNSUPPORTED_METHOD,
    USER_REJECTED_REQUEST,
    WALLET_ADD_CHAIN,
    WALLET_REQUEST_PERMISSIONS,
    WALLET_SWITCH_CHAIN,
    parse_chain_id,
)


logger = logging.getLogger(__name__)


class LocalAccountProvider:
    def __init__(
        self,
        accounts: Iterable[LocalAccount],
        chain_id: int = 1,
        known_chains: Optional[Iterable[int]] = None,
        reject_signatures: bool = False,
    ):
        self.accounts: List[LocalAccount] = list(accounts)
        self.chain_id = chain_id
        self.known_chains = {chain_id, *(known_chains or [])}
        self.added_chains: Dict[int, Dict[str, Any]] = {}
        self.reject_signatures = reject_signatures
        self.calls: List[str] = []

    @classmethod
    def from_keys(cls, private_keys: Iterable[str], **kwargs) -> "LocalAccountProvider":
        return cls([EthAccount.from_key(key) for key in private_keys], **kwargs)

    @property
    def addresses(self) -> List[str]:
        return [account.address for account in self.accounts]

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        params = params or []
        self.calls.append(method)

        if method == ETH_CHAIN_ID:
            return hex(self.chain_id)
        if method in (ETH_ACCOUNTS, ETH_REQUEST_ACCOUNTS):
            return self.addresses
        if method == WALLET_REQUEST_PERMISSIONS:
            return [{"parentCapability": ETH_ACCOUNTS}]
        if method == WALLET_SWITCH_CHAIN:
            return self._switch_chain(params[0]["chainId"])
        if method == WALLET_ADD_CHAIN:
            return self._add_chain(params[0])
        if method == ETH_SIGN_TYPED_DATA_V4:
            address, payload = params[0], params[1]
            return self._sign_typed_data(address, payload)
        if method == PERSONAL_SIGN:
            message, address = params[0], params[1]
            return self._personal_sign(message, address)

        raise ProviderRpcError(UNSUPPORTED_METHOD, f"Unsupported method: {method}")

    def _switch_chain(self, chain_id_hex: str) -> None:
        chain_id = parse_chain_id(chain_id_hex)
        if chain_id not in self.known_chains:
            raise ProviderRpcError(UNRECOGNIZED_CHAIN, f"Unrecognized chain ID {chain_id_hex}")
        self.chain_id = chain_id
        logger.debug(f"Switched to chain {chain_id}")
        return None

    def _add_chain(self, descriptor: Dict[str, Any]) -> None:
        if self.reject_signatures:
            raise ProviderRpcError(USER_REJECTED_REQUEST, "User rejected the request.")

        chain_id = parse_chain_id(descriptor.get("chainId"))
        if chain_id is None:
            raise ProviderRpcError(-32602, "Invalid chainId")

        self.known_chains.add(chain_id)
        self.added_chains[chain_id] = dict(descriptor)
        # Wallets switch to a freshly added chain
        self.chain_id = chain_id
        return None

    def _account_for(self, address: str) -> LocalAccount:
        for account in self.accounts:
            if account.address.lower() == str(address).lower():
                return account
        raise ProviderRpcError(UNAUTHORIZED, f"Unknown account {address}")

    def _sign_typed_data(self, address: str, payload: Any) -> str:
        account = self._account_for(address)
        if self.reject_signatures:
            raise ProviderRpcError(USER_REJECTED_REQUEST, "User rejected the request.")

        full_message = json.loads(payload) if isinstance(payload, str) else payload
        signed = account.sign_typed_data(full_message=full_message)
        return to_hex(signed.signature)

    def _personal_sign(self, message: str, address: str) -> str:
        account = self._account_for(address)
        if self.reject_signatures:
            raise ProviderRpcError(USER_REJECTED_REQUEST, "User rejected the request.")

        signable = encode_defunct(hexstr=message) if message.startswith("0x") else encode_defunct(text=message)
        signed = account.sign_message(signable)
        return to_hex(signed.signature)
