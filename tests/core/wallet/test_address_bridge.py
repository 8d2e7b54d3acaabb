"""
Tests for EVM -> Algorand address derivation and reverse lookup.
"""

import pytest
from unittest.mock import AsyncMock

from liquid_wallet.core.wallet import Account, AccountMetadata, AddressBridge, ConnectorInfo, WalletError


EVM_A = "0xAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAa"
EVM_B = "0xBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBb"


def _bridge(sdk):
    async def loader():
        return sdk

    return AddressBridge(loader)


@pytest.mark.asyncio
async def test_derive_keeps_input_order_and_metadata(fake_sdk, derive):
    bridge = _bridge(fake_sdk)

    accounts = await bridge.derive([EVM_A, EVM_B], "Rainbow")

    assert [a.evm_address for a in accounts] == [EVM_A, EVM_B]
    assert [a.address for a in accounts] == [derive(EVM_A), derive(EVM_B)]
    assert accounts[0].name == f"Rainbow {EVM_A}"
    assert fake_sdk.get_address_calls == [EVM_A, EVM_B]


@pytest.mark.asyncio
async def test_reverse_lookup_round_trips(fake_sdk):
    bridge = _bridge(fake_sdk)

    accounts = await bridge.derive([EVM_A, EVM_B], "Rainbow")

    for account in accounts:
        assert bridge.reverse_lookup(account.address) == account.evm_address
    assert bridge.reverse_lookup("UNKNOWN") is None


@pytest.mark.asyncio
async def test_derive_is_deterministic(fake_sdk):
    bridge = _bridge(fake_sdk)

    first = await bridge.derive([EVM_A], "Rainbow")
    second = await bridge.derive([EVM_A], "Rainbow")

    assert first[0].address == second[0].address
    assert len(bridge) == 1


@pytest.mark.asyncio
async def test_connector_info_is_stored_in_metadata(fake_sdk):
    bridge = _bridge(fake_sdk)

    accounts = await bridge.derive([EVM_A], "EVM Wallet", ConnectorInfo(name="MetaMask", icon="data:icon"))

    assert accounts[0].metadata == AccountMetadata(
        evm_address=EVM_A, connector_name="MetaMask", connector_icon="data:icon"
    )


@pytest.mark.asyncio
async def test_failed_derivation_leaves_map_untouched(fake_sdk, derive):
    sdk = AsyncMock()
    sdk.get_address.side_effect = [derive(EVM_A), RuntimeError("sdk down")]
    bridge = _bridge(sdk)

    with pytest.raises(RuntimeError):
        await bridge.derive([EVM_A, EVM_B], "Rainbow")

    assert len(bridge) == 0
    assert bridge.reverse_lookup(derive(EVM_A)) is None


@pytest.mark.asyncio
async def test_invalid_derived_address_is_rejected():
    sdk = AsyncMock()
    sdk.get_address.return_value = "not-an-algorand-address"
    bridge = _bridge(sdk)

    with pytest.raises(WalletError):
        await bridge.derive([EVM_A], "Rainbow")


def test_rebuild_from_replaces_map_and_skips_accounts_without_evm(derive):
    bridge = _bridge(None)
    persisted = [
        Account(name="a", address=derive(EVM_A), metadata=AccountMetadata(evm_address=EVM_A)),
        Account(name="legacy", address=derive(EVM_B)),
    ]

    assert bridge.rebuild_from(persisted) == 1
    assert bridge.reverse_lookup(derive(EVM_A)) == EVM_A
    assert derive(EVM_B) not in bridge

    assert bridge.rebuild_from([]) == 0
    assert len(bridge) == 0


@pytest.mark.asyncio
async def test_clear(fake_sdk):
    bridge = _bridge(fake_sdk)
    await bridge.derive([EVM_A], "Rainbow")

    bridge.clear()

    assert len(bridge) == 0
