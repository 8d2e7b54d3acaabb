import pytest
from eth_account import Account as EthAccount
from eth_account.messages import encode_defunct, encode_typed_data

from liquid_wallet.core.wallet import ProviderRpcError, TypedData
from liquid_wallet.providers.local import LocalAccountProvider


TYPED_DATA = TypedData(
    domain={"name": "Liquid Accounts", "version": "1", "chainId": 4160},
    types={
        "EIP712Domain": [
            {"name": "name", "type": "string"},
            {"name": "version", "type": "string"},
            {"name": "chainId", "type": "uint256"},
        ],
        "Message": [{"name": "contents", "type": "string"}],
    },
    primary_type="Message",
    message={"contents": "hello algorand"},
)


@pytest.mark.asyncio
async def test_chain_id_and_accounts(evm_accounts):
    provider = LocalAccountProvider(evm_accounts, chain_id=1)

    assert await provider.request("eth_chainId") == "0x1"
    assert await provider.request("eth_accounts") == [a.address for a in evm_accounts]
    assert await provider.request("eth_requestAccounts") == [a.address for a in evm_accounts]


@pytest.mark.asyncio
async def test_switch_to_unknown_chain_raises_4902(evm_accounts):
    provider = LocalAccountProvider(evm_accounts)

    with pytest.raises(ProviderRpcError) as exc_info:
        await provider.request("wallet_switchEthereumChain", [{"chainId": "0x1040"}])

    assert exc_info.value.code == 4902


@pytest.mark.asyncio
async def test_add_chain_registers_and_switches(evm_accounts, settings):
    provider = LocalAccountProvider(evm_accounts)

    await provider.request("wallet_addEthereumChain", [settings.network_descriptor().to_dict()])

    assert provider.chain_id == 4160
    assert provider.added_chains[4160]["chainName"] == "Algorand"
    await provider.request("wallet_switchEthereumChain", [{"chainId": "0x1"}])
    assert provider.chain_id == 1


@pytest.mark.asyncio
async def test_sign_typed_data_v4(evm_accounts):
    provider = LocalAccountProvider(evm_accounts)
    signer = evm_accounts[1]

    signature = await provider.request("eth_signTypedData_v4", [signer.address, TYPED_DATA.to_json()])

    recovered = EthAccount.recover_message(encode_typed_data(full_message=TYPED_DATA.to_dict()), signature=signature)
    assert recovered == signer.address
    assert signature.startswith("0x")


@pytest.mark.asyncio
async def test_personal_sign(evm_accounts):
    provider = LocalAccountProvider(evm_accounts)
    signer = evm_accounts[0]

    signature = await provider.request("personal_sign", ["0x68656c6c6f", signer.address])

    assert EthAccount.recover_message(encode_defunct(hexstr="0x68656c6c6f"), signature=signature) == signer.address


@pytest.mark.asyncio
async def test_rejection_and_unknown_account(evm_accounts):
    provider = LocalAccountProvider(evm_accounts, reject_signatures=True)

    with pytest.raises(ProviderRpcError) as rejected:
        await provider.request("eth_signTypedData_v4", [evm_accounts[0].address, TYPED_DATA.to_json()])
    assert rejected.value.code == 4001

    with pytest.raises(ProviderRpcError) as unknown:
        await provider.request("personal_sign", ["0x00", "0x0000000000000000000000000000000000000001"])
    assert unknown.value.code == 4100


@pytest.mark.asyncio
async def test_unsupported_method(evm_accounts):
    provider = LocalAccountProvider(evm_accounts)

    with pytest.raises(ProviderRpcError) as exc_info:
        await provider.request("eth_sendTransaction", [{}])

    assert exc_info.value.code == 4200


def test_from_keys():
    provider = LocalAccountProvider.from_keys(["0x" + "33" * 32])
    assert provider.addresses == [EthAccount.from_key("0x" + "33" * 32).address]
