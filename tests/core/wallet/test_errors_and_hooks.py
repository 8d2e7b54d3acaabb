import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from liquid_wallet.core.wallet import (
    ErrorKind,
    EvmAccount,
    HookResolver,
    InvalidTransactionGroupError,
    LazyResource,
    MultipleSignersError,
    NetworkUnregisteredError,
    ProviderRpcError,
    UIHooks,
    UserRejectedError,
    translate_provider_error,
)
from liquid_wallet.core.wallet.errors import provider_error_codes


def test_provider_error_codes_include_nested_code():
    error = ProviderRpcError(-32603, "Internal", data={"originalError": {"code": 4902}})
    assert provider_error_codes(error) == {-32603, 4902}


def test_translate_user_rejection():
    translated = translate_provider_error(ProviderRpcError(4001, "User denied"))
    assert isinstance(translated, UserRejectedError)
    assert translated.kind == ErrorKind.USER_REJECTED


def test_translate_unregistered_chain():
    translated = translate_provider_error(
        ProviderRpcError(4902, "Unknown chain"), unregistered_codes={4902}, chain_id="0x1040"
    )
    assert isinstance(translated, NetworkUnregisteredError)
    assert translated.chain_id == "0x1040"


def test_translate_passes_unknown_errors_through():
    error = ValueError("boom")
    assert translate_provider_error(error, unregistered_codes={4902}) is error


def test_error_kinds():
    assert MultipleSignersError(["0xb", "0xa", "0xb"]).evm_addresses == ["0xa", "0xb"]
    assert isinstance(InvalidTransactionGroupError("bad"), ValueError)
    assert str(ProviderRpcError(4100, "Unauthorized")) == "Unauthorized (code 4100)"


@pytest.mark.asyncio
async def test_wallet_hook_overrides_manager_hook():
    wallet_hook = MagicMock()
    manager_hook = MagicMock()
    resolver = HookResolver(UIHooks(on_connect=wallet_hook), UIHooks(on_connect=manager_hook))

    await resolver.notify_connect(EvmAccount("0xabc", "ALGO"))

    wallet_hook.assert_called_once()
    manager_hook.assert_not_called()


@pytest.mark.asyncio
async def test_manager_hooks_are_resolved_lazily():
    holder = {"hooks": None}
    resolver = HookResolver(manager_hooks=lambda: holder["hooks"])
    after_sign = AsyncMock()

    await resolver.after_sign(True)
    holder["hooks"] = UIHooks(on_after_sign=after_sign)
    await resolver.after_sign(False, "boom")

    after_sign.assert_awaited_once_with(False, "boom")


@pytest.mark.asyncio
async def test_before_sign_failure_propagates():
    resolver = HookResolver(UIHooks(on_before_sign=AsyncMock(side_effect=RuntimeError("no"))))

    with pytest.raises(RuntimeError):
        await resolver.before_sign([b"txn"], None)


@pytest.mark.asyncio
async def test_lazy_resource_initializes_once_under_concurrency():
    calls = []

    async def factory():
        calls.append(1)
        await asyncio.sleep(0)
        return object()

    lazy = LazyResource(factory, "thing")
    first, second = await asyncio.gather(lazy.get(), lazy.get())

    assert first is second
    assert await lazy.get() is first
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_lazy_resource_retries_after_failure():
    factory = MagicMock(side_effect=[RuntimeError("down"), "ready"])
    lazy = LazyResource(factory, "thing")

    with pytest.raises(RuntimeError):
        await lazy.get()

    assert await lazy.get() == "ready"
    assert factory.call_count == 2


@pytest.mark.asyncio
async def test_lazy_resource_rebuilds_after_reset():
    factory = MagicMock(side_effect=["first", "second"])
    lazy = LazyResource(factory, "thing")

    assert await lazy.get() == "first"
    lazy.reset()
    assert await lazy.get() == "second"


def test_lazy_resource_can_be_built_outside_a_running_loop():
    lazy = LazyResource(lambda: "ready", "thing")

    assert asyncio.run(lazy.get()) == "ready"
