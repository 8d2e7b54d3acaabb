from typing import Any, List, Optional, Protocol, runtime_checkable


# EIP-1193 / wallet RPC method names used by the bridge
ETH_CHAIN_ID = "eth_chainId"
ETH_ACCOUNTS = "eth_accounts"
ETH_REQUEST_ACCOUNTS = "eth_requestAccounts"
WALLET_REQUEST_PERMISSIONS = "wallet_requestPermissions"
WALLET_SWITCH_CHAIN = "wallet_switchEthereumChain"
WALLET_ADD_CHAIN = "wallet_addEthereumChain"
ETH_SIGN_TYPED_DATA_V4 = "eth_signTypedData_v4"
PERSONAL_SIGN = "personal_sign"

# EIP-1193 provider error codes
USER_REJECTED_REQUEST = 4001
UNAUTHORIZED = 4100
UNSUPPORTED_METHOD = 4200
UNRECOGNIZED_CHAIN = 4902


@runtime_checkable
class EvmProvider(Protocol):
    """EIP-1193 compatible provider.

    Implementations raise ProviderRpcError carrying the vendor error code.
    """

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Send an RPC request to the wallet."""
        ...


def parse_chain_id(value: Any) -> Optional[int]:
    """Providers report eth_chainId as hex strings, decimal strings or ints."""

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        try:
            return int(text, 16) if text.startswith("0x") else int(text)
        except ValueError:
            return None
    return None
