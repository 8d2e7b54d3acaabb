"""Service layer helpers"""

from .address import (
    connected_evm_addresses,
    is_evm_address,
    is_valid_algorand_address,
    unique_addresses,
)

__all__ = [
    "connected_evm_addresses",
    "is_evm_address",
    "is_valid_algorand_address",
    "unique_addresses",
]
