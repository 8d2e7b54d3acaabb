"""
Transaction group normalization and signer-eligibility classification.

A group arrives either as algosdk Transaction objects or as msgpack-encoded
blobs, possibly nested one level (a list of atomic groups). The shape is
resolved once into a tagged union; everything after normalize works on
decoded Transaction objects with their original flat index.
"""

import base64
from dataclasses import dataclass, field
from typing import Any, Collection, Iterable, List, Optional, Sequence, Union

import msgpack
from algosdk import encoding
from algosdk.transaction import Transaction

from .errors import InvalidTransactionGroupError, WalletError


_SIGNATURE_KEYS = ("sig", "msig", "lsig")

TransactionGroup = Union[
    Sequence[Transaction],
    Sequence[Sequence[Transaction]],
    Sequence[bytes],
    Sequence[Sequence[bytes]],
]


@dataclass
class StructuredGroup:
    transactions: List[Transaction]


@dataclass
class EncodedGroup:
    blobs: List[bytes]


@dataclass
class DecodedTransaction:
    txn: Transaction
    signed: bool = False


@dataclass
class TransactionEntry:
    """One position of a flattened group."""
    txn: Transaction
    index: int
    eligible: bool
    signed: bool = False

    @property
    def sender(self) -> str:
        return str(self.txn.sender)


@dataclass
class SigningBatch:
    """All entries of a group, in order, plus the positions selected for signing."""
    entries: List[TransactionEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def transactions(self) -> List[Transaction]:
        return [entry.txn for entry in self.entries]

    @property
    def sign_indexes(self) -> List[int]:
        return [entry.index for entry in self.entries if entry.eligible]

    @property
    def eligible_entries(self) -> List[TransactionEntry]:
        return [entry for entry in self.entries if entry.eligible]

    @property
    def is_empty(self) -> bool:
        return not any(entry.eligible for entry in self.entries)

    def placeholders(self) -> List[Optional[bytes]]:
        return [None] * len(self.entries)

    def reassemble(self, signed_blobs: Sequence[bytes]) -> List[Optional[bytes]]:
        """Spread signed blobs back over the eligible positions, None elsewhere."""
        sign_indexes = self.sign_indexes
        if len(signed_blobs) != len(sign_indexes):
            raise WalletError(
                f"Signer returned {len(signed_blobs)} signed transaction(s) "
                f"for {len(sign_indexes)} requested"
            )

        blobs = iter(signed_blobs)
        return [next(blobs) if entry.eligible else None for entry in self.entries]


def flatten_group(group: Iterable[Any]) -> List[Any]:
    """Flatten one level of nesting (a list of atomic groups)."""

    flat: List[Any] = []
    for item in group:
        if isinstance(item, (list, tuple)):
            flat.extend(item)
        else:
            flat.append(item)
    return flat


def as_tagged_group(group: Iterable[Any]) -> Union[StructuredGroup, EncodedGroup]:
    flat = flatten_group(group)

    if all(isinstance(item, Transaction) for item in flat):
        return StructuredGroup(transactions=flat)
    if all(isinstance(item, (bytes, bytearray, memoryview)) for item in flat):
        return EncodedGroup(blobs=[bytes(item) for item in flat])

    kinds = sorted({type(item).__name__ for item in flat})
    raise InvalidTransactionGroupError(
        "Transaction groups must contain only Transaction objects or only encoded bytes, "
        f"got: {', '.join(kinds)}"
    )


def is_signed_txn(decoded: Any) -> bool:
    """True for a signed-transaction wrapper carrying a signature of any kind."""

    if not isinstance(decoded, dict) or "txn" not in decoded:
        return False
    return any(key in decoded for key in _SIGNATURE_KEYS)


def decode_transaction(blob: bytes) -> DecodedTransaction:
    """Decode a msgpack blob that is either a signed wrapper or a bare transaction."""

    try:
        decoded = msgpack.unpackb(blob, raw=False)
    except Exception as exc:
        raise InvalidTransactionGroupError(f"Cannot decode transaction: {exc}") from exc

    if not isinstance(decoded, dict):
        raise InvalidTransactionGroupError("Encoded transaction is not a msgpack map")

    signed = is_signed_txn(decoded)
    txn_fields = decoded["txn"] if "txn" in decoded else decoded
    try:
        txn = Transaction.undictify(txn_fields)
    except Exception as exc:
        raise InvalidTransactionGroupError(f"Cannot decode transaction: {exc}") from exc
    return DecodedTransaction(txn=txn, signed=signed)


def encode_unsigned(txn: Transaction) -> bytes:
    return base64.b64decode(encoding.msgpack_encode(txn))


class TransactionGroupProcessor:
    """Normalizes transaction groups and selects the entries this wallet signs."""

    def normalize(self, group: TransactionGroup) -> List[DecodedTransaction]:
        tagged = as_tagged_group(group)
        if isinstance(tagged, StructuredGroup):
            return [DecodedTransaction(txn=txn) for txn in tagged.transactions]
        return [decode_transaction(blob) for blob in tagged.blobs]

    def classify(
        self,
        decoded: Sequence[DecodedTransaction],
        owned_addresses: Collection[str],
        indexes_to_sign: Optional[Collection[int]] = None,
    ) -> SigningBatch:
        owned = set(owned_addresses)
        wanted = set(indexes_to_sign) if indexes_to_sign is not None else None

        entries: List[TransactionEntry] = []
        for index, item in enumerate(decoded):
            is_index_match = wanted is None or index in wanted
            can_sign = not item.signed and str(item.txn.sender) in owned
            entries.append(
                TransactionEntry(
                    txn=item.txn,
                    index=index,
                    eligible=is_index_match and can_sign,
                    signed=item.signed,
                )
            )
        return SigningBatch(entries=entries)

    def prepare(
        self,
        group: TransactionGroup,
        owned_addresses: Collection[str],
        indexes_to_sign: Optional[Collection[int]] = None,
    ) -> SigningBatch:
        return self.classify(self.normalize(group), owned_addresses, indexes_to_sign)
