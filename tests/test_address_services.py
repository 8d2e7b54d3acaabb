from liquid_wallet.services.address import (
    connected_evm_addresses,
    is_evm_address,
    is_valid_algorand_address,
    unique_addresses,
)


def test_evm_address_validation():
    address = "0x1234567890abcdef1234567890ABCDEF12345678"
    assert is_evm_address(address.lower()) is True
    assert is_evm_address(address[:-1]) is False
    assert is_evm_address("") is False


def test_algorand_address_validation(derive):
    address = derive("0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed")
    assert is_valid_algorand_address(address) is True
    assert is_valid_algorand_address(address[:-1]) is False
    assert is_valid_algorand_address(address.lower()) is False
    assert is_valid_algorand_address("0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed") is False


def test_unique_addresses_is_case_insensitive_and_ordered():
    addresses = ["0xAbC", "0xdef", "0xabc", "0xDEF", "0x123"]
    assert unique_addresses(addresses) == ["0xAbC", "0xdef", "0x123"]


def test_connected_evm_addresses_drops_invalid_entries():
    checksummed = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
    reported = ["not-an-address", checksummed, None, checksummed.lower(), "0x123"]

    assert connected_evm_addresses(reported) == [checksummed]
    assert connected_evm_addresses(["0xdeadbeef", ""]) == []
