from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Set

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:  # pragma: no cover
    from .core.wallet.models import NetworkDescriptor


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    log_level: str = Field(default="INFO", description="Logging level")

    # Algod (used to build the derivation SDK)
    algod_server: str = Field(
        default="https://testnet-api.algonode.cloud",
        description="Algod REST endpoint handed to the derivation SDK",
    )
    algod_token: str = Field(default="", description="Algod API token")
    algod_port: str = Field(default="", description="Algod port, appended to algod_server when set")

    # Liquid Accounts derivation SDK
    liquid_sdk_factory: str = Field(
        default="",
        description="Import path ('module:callable') of the Liquid EVM SDK factory",
        validation_alias=AliasChoices("liquid_sdk_factory", "LIQUID_EVM_SDK"),
    )

    # Algorand virtual EVM network
    algorand_evm_chain_id: int = Field(default=4160, description="EVM chain id designated for Algorand")
    algorand_evm_chain_name: str = Field(default="Algorand", description="Chain name shown by EVM wallets")
    algorand_evm_rpc_url: str = Field(
        default="",
        description="RPC endpoint advertised in wallet_addEthereumChain (required by most wallets)",
    )
    algorand_evm_explorer_url: str = Field(
        default="",
        description="Block explorer advertised in wallet_addEthereumChain",
    )
    native_currency_name: str = Field(default="Algo", description="Native currency name")
    native_currency_symbol: str = Field(default="ALGO", description="Native currency symbol")
    native_currency_decimals: int = Field(
        default=18,
        description="Decimals advertised to EVM wallets (most of them only accept 18)",
    )

    # Provider error conventions
    unregistered_chain_error_codes: Set[int] = Field(
        default_factory=lambda: {4902},
        description="Switch-chain error codes meaning the chain is unknown to the wallet",
    )
    user_rejected_error_code: int = Field(default=4001, description="EIP-1193 user rejection code")

    # Transport
    rpc_timeout_seconds: float = Field(default=30.0, description="JSON-RPC request timeout")

    # Session persistence
    wallet_store_path: str = Field(
        default="",
        description="JSON file backing the wallet store (empty keeps state in memory)",
    )

    # dApp metadata passed to wallet SDKs that want it
    dapp_name: str = Field(default="Algorand dApp", description="dApp name shown in wallet prompts")
    dapp_url: str = Field(default="", description="dApp URL shown in wallet prompts")
    dapp_icon_url: str = Field(default="", description="dApp icon shown in wallet prompts")

    @property
    def has_sdk_factory(self) -> bool:
        return bool(self.liquid_sdk_factory)

    @property
    def chain_id_hex(self) -> str:
        return hex(self.algorand_evm_chain_id)

    @property
    def algod_address(self) -> str:
        server = self.algod_server.rstrip("/")
        if self.algod_port:
            return f"{server}:{self.algod_port}"
        return server

    @property
    def store_path(self) -> Optional[Path]:
        return Path(self.wallet_store_path) if self.wallet_store_path else None

    def network_descriptor(self) -> "NetworkDescriptor":
        """Build the wallet_addEthereumChain descriptor for the Algorand network."""

        from .core.wallet.models import NetworkDescriptor as _NetworkDescriptor

        explorers: List[str] = [self.algorand_evm_explorer_url] if self.algorand_evm_explorer_url else []
        return _NetworkDescriptor(
            chain_id=self.algorand_evm_chain_id,
            chain_name=self.algorand_evm_chain_name,
            rpc_urls=[self.algorand_evm_rpc_url] if self.algorand_evm_rpc_url else [],
            native_currency={
                "name": self.native_currency_name,
                "symbol": self.native_currency_symbol,
                "decimals": self.native_currency_decimals,
            },
            block_explorer_urls=explorers,
        )


# Global settings instance
settings = Settings()
