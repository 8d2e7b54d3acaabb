"""
Batched signing of Algorand transaction groups with one EVM typed-data prompt.
"""

import logging
from typing import Any, Collection, Dict, List, Optional, Protocol, Union

from ...providers.base import EvmProvider
from ...providers.liquid_sdk import LiquidEvmSdk
from .address_bridge import AddressBridge
from .chain_guard import ChainGuard
from .errors import (
    MultipleSignersError,
    NoSourceAddressError,
    translate_provider_error,
)
from .hooks import HookResolver
from .models import TypedData
from .session import SessionReconciler
from .transactions import (
    SigningBatch,
    TransactionGroup,
    TransactionGroupProcessor,
    encode_unsigned,
)


logger = logging.getLogger(__name__)


class SigningContext(Protocol):
    """What the orchestrator needs from the wallet that owns it."""

    @property
    def addresses(self) -> List[str]: ...

    async def get_sdk(self) -> LiquidEvmSdk: ...

    async def get_evm_provider(self) -> EvmProvider: ...

    async def sign_typed_data(self, typed_data: TypedData, evm_address: str) -> str: ...


class SigningOrchestrator:
    def __init__(
        self,
        processor: TransactionGroupProcessor,
        bridge: AddressBridge,
        reconciler: SessionReconciler,
        chain_guard: ChainGuard,
        hooks: HookResolver,
        context: SigningContext,
        wallet_id: str = "",
    ):
        self.processor = processor
        self.bridge = bridge
        self.reconciler = reconciler
        self.chain_guard = chain_guard
        self.hooks = hooks
        self.context = context
        self.wallet_id = wallet_id

    async def sign_transactions(
        self,
        group: TransactionGroup,
        indexes_to_sign: Optional[Collection[int]] = None,
    ) -> List[Optional[bytes]]:
        """
        Sign every eligible transaction of ``group`` with a single SDK call.

        Args:
            group: Transactions or encoded blobs, flat or nested one level
            indexes_to_sign: Optional filter of flat indexes to consider

        Returns:
            One entry per flattened transaction: the signed blob for the
            positions this wallet signed, None everywhere else.

        Raises:
            NoSourceAddressError: An eligible sender has no EVM address mapping
            MultipleSignersError: Eligible senders map to different EVM accounts
            UserRejectedError: The user declined the signature prompt
        """
        requested = list(indexes_to_sign) if indexes_to_sign is not None else None
        index_filter = sorted(requested) if requested is not None else None
        try:
            logger.debug(f"[{self.wallet_id}] Signing transactions (indexes: {index_filter})")
            batch = self.processor.prepare(group, self.context.addresses, index_filter)

            if batch.is_empty:
                logger.debug(f"[{self.wallet_id}] No transactions to sign")
                return batch.placeholders()

            evm_address = self.resolve_signer(batch)

            await self.hooks.before_sign(
                [encode_unsigned(txn) for txn in batch.transactions],
                requested,
            )

            await self.chain_guard.ensure(self.context.get_evm_provider)

            sdk = await self.context.get_sdk()

            async def sign_message(typed_data: Union[TypedData, Dict[str, Any]]) -> str:
                return await self._sign_message(typed_data, evm_address)

            signed_blobs = await sdk.sign_transactions(
                evm_address,
                batch.transactions,
                batch.sign_indexes,
                sign_message,
            )
            result = batch.reassemble(list(signed_blobs))
        except Exception as exc:
            await self.hooks.after_sign(False, str(exc))
            logger.error(f"[{self.wallet_id}] Error signing transactions: {exc}")
            raise

        await self.hooks.after_sign(True)
        logger.debug(f"[{self.wallet_id}] Signed {len(batch.sign_indexes)} of {len(batch)} transaction(s)")
        return result

    def resolve_signer(self, batch: SigningBatch) -> str:
        """Map the eligible senders onto exactly one EVM address."""

        senders = list(dict.fromkeys(entry.sender for entry in batch.eligible_entries))

        unresolved = [sender for sender in senders if self.bridge.reverse_lookup(sender) is None]
        if unresolved:
            logger.debug(f"[{self.wallet_id}] EVM mapping missing, rebuilding from stored metadata")
            self.reconciler.rebuild_from_store()

        evm_addresses: List[str] = []
        for sender in senders:
            evm_address = self.bridge.reverse_lookup(sender)
            if evm_address is None:
                raise NoSourceAddressError(sender)
            if evm_address not in evm_addresses:
                evm_addresses.append(evm_address)

        if len(evm_addresses) > 1:
            raise MultipleSignersError(evm_addresses)
        return evm_addresses[0]

    async def _sign_message(self, typed_data: Union[TypedData, Dict[str, Any]], evm_address: str) -> str:
        if not isinstance(typed_data, TypedData):
            typed_data = TypedData.from_dict(typed_data)
        try:
            return await self.context.sign_typed_data(typed_data, evm_address)
        except Exception as exc:
            translated = translate_provider_error(exc, rejected_code=self.chain_guard.rejected_code)
            if translated is exc:
                raise
            raise translated from exc
