from liquid_wallet.config import Settings


def test_sdk_factory_alias(monkeypatch):
    """SDK factory should load from the LIQUID_EVM_SDK alias when present."""

    monkeypatch.delenv("LIQUID_SDK_FACTORY", raising=False)
    monkeypatch.setenv("LIQUID_EVM_SDK", "liquid_accounts_evm:LiquidEvmSdk")

    settings = Settings()

    assert settings.liquid_sdk_factory == "liquid_accounts_evm:LiquidEvmSdk"
    assert settings.has_sdk_factory is True


def test_algorand_chain_defaults(monkeypatch):
    monkeypatch.delenv("ALGORAND_EVM_CHAIN_ID", raising=False)

    settings = Settings()

    assert settings.algorand_evm_chain_id == 4160
    assert settings.chain_id_hex == "0x1040"
    assert settings.unregistered_chain_error_codes == {4902}
    assert settings.user_rejected_error_code == 4001


def test_unregistered_codes_from_env(monkeypatch):
    monkeypatch.setenv("UNREGISTERED_CHAIN_ERROR_CODES", "[4902, -32603]")

    settings = Settings()

    assert settings.unregistered_chain_error_codes == {4902, -32603}


def test_algod_address_with_port(monkeypatch):
    monkeypatch.setenv("ALGOD_SERVER", "http://localhost/")
    monkeypatch.setenv("ALGOD_PORT", "4001")

    settings = Settings()

    assert settings.algod_address == "http://localhost:4001"


def test_network_descriptor_omits_empty_urls():
    settings = Settings(algorand_evm_rpc_url="", algorand_evm_explorer_url="")

    descriptor = settings.network_descriptor().to_dict()

    assert descriptor["chainId"] == "0x1040"
    assert descriptor["rpcUrls"] == []
    assert "blockExplorerUrls" not in descriptor


def test_store_path(tmp_path):
    assert Settings(wallet_store_path="").store_path is None
    assert Settings(wallet_store_path=str(tmp_path / "w.json")).store_path == tmp_path / "w.json"
