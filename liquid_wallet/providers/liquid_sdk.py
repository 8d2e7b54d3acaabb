"""
Liquid Accounts EVM SDK capability.

The SDK derives an Algorand address from an EVM address and turns EIP-712
signatures into signed Algorand transactions. Its cryptography is opaque to
this package; it is consumed through the LiquidEvmSdk protocol and built from
a configurable factory on first use.
"""

import importlib
import inspect
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, List, Optional, Protocol, runtime_checkable

from algosdk.transaction import Transaction
from algosdk.v2client import algod

from ..config import Settings

if TYPE_CHECKING:  # pragma: no cover
    from ..core.wallet.models import TypedData


logger = logging.getLogger(__name__)


SignMessage = Callable[["TypedData"], Awaitable[str]]


@runtime_checkable
class LiquidEvmSdk(Protocol):
    async def get_address(self, evm_address: str) -> str:
        """Derive the Algorand address controlled by ``evm_address``."""
        ...

    async def sign_transactions(
        self,
        evm_address: str,
        txns: List[Transaction],
        indexes: List[int],
        sign_message: SignMessage,
    ) -> List[bytes]:
        """Sign ``txns[i]`` for every ``i`` in ``indexes``.

        ``sign_message`` requests an EIP-712 signature from the EVM wallet.
        Returns one signed transaction blob per index, in index order.
        """
        ...


class SdkConfigurationError(RuntimeError):
    """The Liquid EVM SDK factory is missing or invalid."""
    pass


def build_algod_client(settings: Settings) -> algod.AlgodClient:
    """Create the algod client the SDK uses to query the Algorand network."""

    return algod.AlgodClient(settings.algod_token, settings.algod_address)


def load_sdk_factory(path: str) -> Callable[..., Any]:
    """Import a ``module:callable`` (or ``module.callable``) factory."""

    if not path:
        raise SdkConfigurationError("LIQUID_SDK_FACTORY is required")

    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise SdkConfigurationError(f"Invalid SDK factory path: {path!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise SdkConfigurationError(f"Cannot import SDK module {module_name!r}: {exc}") from exc

    factory = getattr(module, attr, None)
    if factory is None or not callable(factory):
        raise SdkConfigurationError(f"{path!r} is not a callable SDK factory")
    return factory


async def load_liquid_sdk(
    settings: Settings,
    algod_client: Optional[algod.AlgodClient] = None,
) -> LiquidEvmSdk:
    """Build the SDK from ``settings.liquid_sdk_factory``.

    The factory is called with ``algod=<AlgodClient>`` and may be sync or async.
    """
    factory = load_sdk_factory(settings.liquid_sdk_factory)
    client = algod_client or build_algod_client(settings)

    logger.info("Initializing Liquid EVM SDK...")
    sdk = factory(algod=client)
    if inspect.isawaitable(sdk):
        sdk = await sdk
    logger.info("Liquid EVM SDK initialized")
    return sdk
