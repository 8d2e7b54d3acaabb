import pytest

from liquid_wallet.core.wallet import (
    Account,
    AccountMetadata,
    AddressBridge,
    ConnectorInfo,
    SessionReconciler,
    WalletState,
    compare_accounts,
)


EVM_A = "0xAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAa"
EVM_B = "0xBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBb"


@pytest.fixture
def reconciler(fake_sdk, store):
    async def loader():
        return fake_sdk

    return SessionReconciler(AddressBridge(loader), store, "evm")


def _persisted(derive, *evm_addresses, connector_name=None):
    accounts = [
        Account(
            name=f"EVM Wallet {evm}",
            address=derive(evm),
            metadata=AccountMetadata(evm_address=evm, connector_name=connector_name),
        )
        for evm in evm_addresses
    ]
    return WalletState(accounts=accounts, active_account=accounts[0] if accounts else None)


def test_compare_accounts_ignores_order(derive):
    a = Account(name="a", address=derive(EVM_A))
    b = Account(name="b", address=derive(EVM_B))

    assert compare_accounts([a, b], [b, a]) is True
    assert compare_accounts([a], [a, b]) is False


@pytest.mark.asyncio
async def test_no_persisted_session_is_a_noop(reconciler, store, fake_sdk):
    result = await reconciler.resume([EVM_A], None, label="EVM Wallet")

    assert result.accounts == []
    assert result.should_persist is False
    assert fake_sdk.get_address_calls == []
    assert store.wallets == {}


@pytest.mark.asyncio
async def test_matching_session_does_not_persist(reconciler, derive):
    result = await reconciler.resume([EVM_B, EVM_A], _persisted(derive, EVM_A, EVM_B), label="EVM Wallet")

    assert result.should_persist is False
    assert [a.evm_address for a in result.accounts] == [EVM_B, EVM_A]


@pytest.mark.asyncio
async def test_mismatch_requests_persist(reconciler, derive, caplog):
    result = await reconciler.resume([EVM_A, EVM_B], _persisted(derive, EVM_A), label="EVM Wallet")

    assert result.should_persist is True
    assert len(result.accounts) == 2
    assert "Session accounts mismatch" in caplog.text


@pytest.mark.asyncio
async def test_changed_connector_name_requests_persist(reconciler, derive):
    persisted = _persisted(derive, EVM_A, connector_name="MetaMask")

    result = await reconciler.resume(
        [EVM_A], persisted, label="EVM Wallet", connector_info=ConnectorInfo(name="Rabby")
    )

    assert result.should_persist is True
    assert result.accounts[0].metadata.connector_name == "Rabby"


@pytest.mark.asyncio
async def test_always_refresh_persists_identical_session(fake_sdk, store, derive):
    async def loader():
        return fake_sdk

    reconciler = SessionReconciler(AddressBridge(loader), store, "evm", always_refresh=True)

    result = await reconciler.resume([EVM_A], _persisted(derive, EVM_A), label="EVM Wallet")

    assert result.should_persist is True


@pytest.mark.asyncio
async def test_resume_rebuilds_bridge_from_persisted_metadata(reconciler, derive):
    await reconciler.resume([EVM_A], _persisted(derive, EVM_A, EVM_B), label="EVM Wallet")

    assert reconciler.bridge.reverse_lookup(derive(EVM_B)) == EVM_B


def test_rebuild_from_store(reconciler, store, derive):
    assert reconciler.rebuild_from_store() is False

    store.add_wallet("evm", _persisted(derive, EVM_A))

    assert reconciler.rebuild_from_store() is True
    assert reconciler.bridge.reverse_lookup(derive(EVM_A)) == EVM_A
