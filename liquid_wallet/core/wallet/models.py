"""
Wallet account, session and signing-request models.

Accounts are Algorand accounts derived from EVM accounts; the EVM address is
kept in the account metadata so the mapping can be rebuilt from persisted
state after a reload.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ConnectorInfo:
    """Display metadata of the connector the EVM account came through."""
    name: Optional[str] = None
    icon: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.name and not self.icon

    def merged_with(self, fallback: "ConnectorInfo") -> "ConnectorInfo":
        """Fill missing fields from ``fallback``."""
        return ConnectorInfo(
            name=self.name or fallback.name,
            icon=self.icon or fallback.icon,
        )


@dataclass(frozen=True)
class AccountMetadata:
    """Metadata persisted alongside a derived account."""
    evm_address: str
    connector_name: Optional[str] = None
    connector_icon: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"evmAddress": self.evm_address}
        if self.connector_name:
            data["connectorName"] = self.connector_name
        if self.connector_icon:
            data["connectorIcon"] = self.connector_icon
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["AccountMetadata"]:
        evm_address = data.get("evmAddress")
        if not isinstance(evm_address, str) or not evm_address:
            return None
        return cls(
            evm_address=evm_address,
            connector_name=data.get("connectorName"),
            connector_icon=data.get("connectorIcon"),
        )

    @property
    def connector_info(self) -> ConnectorInfo:
        return ConnectorInfo(name=self.connector_name, icon=self.connector_icon)


@dataclass(frozen=True)
class Account:
    """An Algorand account controlled by an EVM key."""
    name: str
    address: str
    metadata: Optional[AccountMetadata] = None

    @property
    def evm_address(self) -> Optional[str]:
        return self.metadata.evm_address if self.metadata else None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "address": self.address}
        if self.metadata:
            data["metadata"] = self.metadata.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        metadata = data.get("metadata")
        return cls(
            name=data.get("name", ""),
            address=data["address"],
            metadata=AccountMetadata.from_dict(metadata) if isinstance(metadata, dict) else None,
        )


@dataclass
class WalletState:
    """Persisted session of one wallet."""
    accounts: List[Account] = field(default_factory=list)
    active_account: Optional[Account] = None

    @property
    def addresses(self) -> List[str]:
        return [account.address for account in self.accounts]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accounts": [account.to_dict() for account in self.accounts],
            "activeAccount": self.active_account.to_dict() if self.active_account else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WalletState":
        active = data.get("activeAccount")
        return cls(
            accounts=[Account.from_dict(a) for a in data.get("accounts", [])],
            active_account=Account.from_dict(active) if active else None,
        )


@dataclass
class WalletMetadata:
    """Display metadata of a wallet; connector backends may update it at runtime."""
    name: str
    icon: Optional[str] = None
    is_liquid: str = "EVM"


@dataclass(frozen=True)
class EvmAccount:
    """Pair passed to the on_connect hook."""
    evm_address: str
    algorand_address: str


@dataclass
class TypedData:
    """EIP-712 typed data as produced by the Liquid EVM SDK."""
    domain: Dict[str, Any]
    types: Dict[str, List[Dict[str, str]]]
    primary_type: str
    message: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "types": self.types,
            "domain": self.domain,
            "primaryType": self.primary_type,
            "message": self.message,
        }

    def to_json(self) -> str:
        """Serialize for eth_signTypedData_v4."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TypedData":
        return cls(
            domain=dict(data["domain"]),
            types={name: list(fields) for name, fields in data["types"].items()},
            primary_type=data["primaryType"],
            message=dict(data["message"]),
        )

    def types_without_domain(self) -> Dict[str, List[Dict[str, str]]]:
        """Types minus EIP712Domain, which some signing libraries infer themselves."""
        return {name: fields for name, fields in self.types.items() if name != "EIP712Domain"}


@dataclass
class NetworkDescriptor:
    """wallet_addEthereumChain parameter for the Algorand network."""
    chain_id: int
    chain_name: str
    rpc_urls: List[str]
    native_currency: Dict[str, Any]
    block_explorer_urls: List[str] = field(default_factory=list)

    @property
    def chain_id_hex(self) -> str:
        return hex(self.chain_id)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "chainId": self.chain_id_hex,
            "chainName": self.chain_name,
            "nativeCurrency": dict(self.native_currency),
            "rpcUrls": list(self.rpc_urls),
        }
        if self.block_explorer_urls:
            data["blockExplorerUrls"] = list(self.block_explorer_urls)
        return data
