"""
EIP-1193 provider over HTTP JSON-RPC.

Useful for wallets exposed through a local RPC bridge (e.g. a signer daemon)
and for scripting against remote-signer services.
"""

import itertools
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..core.wallet.errors import ProviderRpcError, ProviderUnavailableError


logger = logging.getLogger(__name__)


class JsonRpcProvider:
    """
    Async JSON-RPC 2.0 client implementing EvmProvider.

    Example usage:
        provider = JsonRpcProvider("http://127.0.0.1:8545")
        chain_id = await provider.request("eth_chainId")
        await provider.aclose()
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        if not url:
            raise ProviderUnavailableError("JSON-RPC provider URL is required")

        self.url = url
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json", **(headers or {})}
        self._client = client
        self._owns_client = client is None
        self._ids = itertools.count(1)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout, headers=self.headers)
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Send one JSON-RPC call.

        Raises:
            ProviderRpcError: The node answered with a JSON-RPC error object
            ProviderUnavailableError: Transport failure or non-JSON response
        """
        client = await self._get_client()
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }

        try:
            response = await client.post(self.url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderUnavailableError(
                f"{method} failed with HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderUnavailableError(f"{method} request failed: {str(e)}") from e
        except ValueError as e:
            raise ProviderUnavailableError(f"{method} returned invalid JSON") from e

        error = data.get("error") if isinstance(data, dict) else None
        if error:
            raise ProviderRpcError(
                error.get("code"),
                error.get("message", "JSON-RPC error"),
                error.get("data"),
            )

        if not isinstance(data, dict) or "result" not in data:
            raise ProviderUnavailableError(f"{method} returned a malformed JSON-RPC response")
        return data["result"]
