import hashlib
from typing import Any, Dict, List, Optional

import pytest
from algosdk import encoding
from algosdk.transaction import PaymentTxn, SuggestedParams
from eth_account import Account as EthAccount

from liquid_wallet.config import Settings
from liquid_wallet.connectors.injected import InjectedWalletBackend
from liquid_wallet.core.wallet import LiquidEvmWallet, TypedData
from liquid_wallet.db.store import WalletStore
from liquid_wallet.providers.local import LocalAccountProvider


TESTNET_GENESIS_HASH = "SGO1GKSzyE7IEPItTxCByw9x8FmnrCDexi9/cOUJOiI="


def derive_algorand_address(evm_address: str) -> str:
    """Deterministic stand-in for the Liquid Accounts derivation."""
    return encoding.encode_address(hashlib.sha256(evm_address.lower().encode()).digest())


class FakeLiquidSdk:
    """Liquid EVM SDK double: real EIP-712 prompt, fake signed blobs."""

    def __init__(self):
        self.get_address_calls: List[str] = []
        self.sign_calls: List[Dict[str, Any]] = []
        self.signatures: List[str] = []

    async def get_address(self, evm_address: str) -> str:
        self.get_address_calls.append(evm_address)
        return derive_algorand_address(evm_address)

    async def sign_transactions(self, evm_address, txns, indexes, sign_message) -> List[bytes]:
        self.sign_calls.append({"evm_address": evm_address, "txns": list(txns), "indexes": list(indexes)})

        typed_data = TypedData(
            domain={"name": "Liquid Accounts", "version": "1", "chainId": 4160},
            types={
                "EIP712Domain": [
                    {"name": "name", "type": "string"},
                    {"name": "version", "type": "string"},
                    {"name": "chainId", "type": "uint256"},
                ],
                "AlgorandTransactionGroup": [{"name": "txids", "type": "string"}],
            },
            primary_type="AlgorandTransactionGroup",
            message={"txids": ",".join(txns[i].get_txid() for i in indexes)},
        )
        self.signatures.append(await sign_message(typed_data))
        return [b"signed:" + txns[i].get_txid().encode() for i in indexes]


@pytest.fixture
def settings():
    return Settings(algorand_evm_rpc_url="https://evm.example.test/rpc")


@pytest.fixture
def evm_accounts():
    return [EthAccount.from_key("0x" + "11" * 32), EthAccount.from_key("0x" + "22" * 32)]


@pytest.fixture
def fake_sdk():
    return FakeLiquidSdk()


@pytest.fixture
def store():
    return WalletStore()


@pytest.fixture
def local_provider(evm_accounts):
    return LocalAccountProvider(evm_accounts, chain_id=1)


@pytest.fixture
def wallet(local_provider, store, fake_sdk, settings):
    backend = InjectedWalletBackend(provider=local_provider, name="Rainbow")
    return LiquidEvmWallet("rainbow", backend, store, settings=settings, sdk_factory=lambda algod: fake_sdk)


@pytest.fixture
def make_payment():
    params = SuggestedParams(
        fee=1000,
        first=1,
        last=1001,
        gh=TESTNET_GENESIS_HASH,
        gen="testnet-v1.0",
        flat_fee=True,
    )

    def _make(sender: str, receiver: Optional[str] = None, amount: int = 1000) -> PaymentTxn:
        return PaymentTxn(sender, params, receiver or sender, amount)

    return _make


@pytest.fixture
def derive():
    return derive_algorand_address
