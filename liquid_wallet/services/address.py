"""Helpers for validating and normalizing EVM and Algorand addresses."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Iterable, List

from algosdk import encoding
from eth_utils import is_address


logger = logging.getLogger(__name__)


def is_evm_address(address: str) -> bool:
    """Return True for 0x-prefixed 20-byte hex addresses (checksummed or not)."""

    if not address:
        return False
    return bool(is_address(address))


@lru_cache(maxsize=256)
def is_valid_algorand_address(address: str) -> bool:
    if not address or len(address) != 58:
        return False
    return bool(encoding.is_valid_address(address))


def unique_addresses(addresses: Iterable[str]) -> List[str]:
    """Drop case-insensitive duplicates, keeping the first spelling and order."""

    seen = set()
    result: List[str] = []
    for address in addresses:
        key = address.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(address)
    return result


def connected_evm_addresses(addresses: Iterable[str]) -> List[str]:
    """Accounts reported by an EVM connector, minus anything that is not an EVM address."""

    valid = []
    for address in addresses:
        if isinstance(address, str) and is_evm_address(address):
            valid.append(address)
        else:
            logger.warning(f"Ignoring invalid EVM address from connector: {address!r}")
    return unique_addresses(valid)


__all__ = [
    "connected_evm_addresses",
    "is_evm_address",
    "is_valid_algorand_address",
    "unique_addresses",
]
