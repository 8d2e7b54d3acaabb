"""
Keeps the EVM wallet on the Algorand network before any signature request.

The current chain is read first so wallets that are already on the right
network see no switch prompt. Switching falls back to adding the network when
the wallet reports it as unknown.
"""

import logging
from enum import Enum
from typing import Awaitable, Callable, Iterable, Optional, Union

from ...providers.base import (
    ETH_CHAIN_ID,
    UNRECOGNIZED_CHAIN,
    USER_REJECTED_REQUEST,
    WALLET_ADD_CHAIN,
    WALLET_SWITCH_CHAIN,
    EvmProvider,
    parse_chain_id,
)
from .errors import NetworkUnregisteredError, translate_provider_error
from .models import NetworkDescriptor


logger = logging.getLogger(__name__)


DEFAULT_UNREGISTERED_CODES = frozenset({UNRECOGNIZED_CHAIN})

# A provider, or a zero-argument coroutine function returning one
ProviderSource = Union[EvmProvider, Callable[[], Awaitable[EvmProvider]]]


async def resolve_provider(source: ProviderSource) -> EvmProvider:
    if callable(source) and not hasattr(source, "request"):
        return await source()
    return source


class ChainGuardMode(str, Enum):
    """How strictly a backend enforces the Algorand network."""
    STRICT = "strict"      # Switch/add failures abort signing
    SOFT = "soft"          # Failures are logged; signing continues
    DISABLED = "disabled"  # No network calls at all


class ChainGuard:
    """Switch-then-add protocol against an EIP-1193 provider."""

    mode = ChainGuardMode.STRICT

    def __init__(
        self,
        network: NetworkDescriptor,
        unregistered_codes: Optional[Iterable[int]] = None,
        rejected_code: int = USER_REJECTED_REQUEST,
    ):
        self.network = network
        self.unregistered_codes = frozenset(
            DEFAULT_UNREGISTERED_CODES if unregistered_codes is None else unregistered_codes
        )
        self.rejected_code = rejected_code

    async def ensure(self, source: ProviderSource) -> None:
        """Put the wallet on the target chain; a getter is awaited here, not before."""
        provider = await resolve_provider(source)
        target_hex = self.network.chain_id_hex
        current = await provider.request(ETH_CHAIN_ID)

        if parse_chain_id(current) == self.network.chain_id:
            return

        logger.info(
            f"Wrong chain ({current}), switching to {self.network.chain_name} ({target_hex})..."
        )

        try:
            await provider.request(WALLET_SWITCH_CHAIN, [{"chainId": target_hex}])
        except Exception as switch_error:
            translated = translate_provider_error(
                switch_error,
                rejected_code=self.rejected_code,
                unregistered_codes=self.unregistered_codes,
                chain_id=target_hex,
            )
            if not isinstance(translated, NetworkUnregisteredError):
                if translated is switch_error:
                    raise
                raise translated from switch_error

            logger.info(f"{self.network.chain_name} chain not found, adding it...")
            try:
                await provider.request(WALLET_ADD_CHAIN, [self.network.to_dict()])
            except Exception as add_error:
                translated = translate_provider_error(add_error, rejected_code=self.rejected_code)
                if translated is add_error:
                    raise
                raise translated from add_error


class SoftChainGuard(ChainGuard):
    """
    Chain guard for chain-agnostic signing paths.

    Connection managers that sign EIP-712 data carry the chain id inside the
    typed-data domain, so a failed switch does not invalidate the signature.
    """

    mode = ChainGuardMode.SOFT

    async def ensure(self, source: ProviderSource) -> None:
        try:
            await super().ensure(source)
        except Exception as exc:  # noqa: BLE001
            logger.warning(f"Could not switch to {self.network.chain_name}, continuing: {exc}")


class NoopChainGuard(ChainGuard):
    mode = ChainGuardMode.DISABLED

    async def ensure(self, source: ProviderSource) -> None:
        logger.debug("Chain guard disabled for this connector")


def build_chain_guard(
    mode: ChainGuardMode,
    network: NetworkDescriptor,
    unregistered_codes: Optional[Iterable[int]] = None,
    rejected_code: int = USER_REJECTED_REQUEST,
) -> ChainGuard:
    guard_cls = {
        ChainGuardMode.STRICT: ChainGuard,
        ChainGuardMode.SOFT: SoftChainGuard,
        ChainGuardMode.DISABLED: NoopChainGuard,
    }[ChainGuardMode(mode)]
    return guard_cls(network, unregistered_codes=unregistered_codes, rejected_code=rejected_code)
