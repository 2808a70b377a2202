"""Application configuration using pydantic-settings.

Settings are read once from the environment (or `.env`) and turned into an
explicit `DexConfig` that is handed to the quote providers, so nothing below
the entry points reads the environment directly.
"""

from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

OKX_DEX_BASE_URL = "https://web3.okx.com/api/v5/dex"


@dataclass(frozen=True)
class DexConfig:
    """Explicit configuration for the DEX aggregator integration."""

    api_key: str = ""
    secret_key: str = ""
    passphrase: str = ""
    project_id: str = ""
    base_url: str = OKX_DEX_BASE_URL
    sandbox: bool = True
    catalog_timeout: float = 10.0
    quote_timeout: float = 15.0
    swap_timeout: float = 30.0
    default_slippage: str = "0.5"
    sandbox_fee_factor: Decimal = Decimal("0.997")

    @property
    def has_credentials(self) -> bool:
        """Check if every credential needed for signed requests is present."""
        return all((self.api_key, self.secret_key, self.passphrase, self.project_id))

    @property
    def use_sandbox(self) -> bool:
        """Sandbox is used when requested or when live credentials are missing."""
        return self.sandbox or not self.has_credentials


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Database
    # ======================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/agenpay.db",
        description="Database connection URL",
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=True, description="Enable debug mode")

    # ======================
    # OKX DEX Aggregator
    # ======================
    okx_api_key: str = Field(default="", description="OKX API key")
    okx_secret_key: str = Field(default="", description="OKX API secret used for HMAC signing")
    okx_passphrase: str = Field(default="", description="OKX API passphrase")
    okx_project_id: str = Field(default="", description="OKX Web3 project ID")
    okx_dex_base_url: str = Field(default=OKX_DEX_BASE_URL, description="OKX DEX API base URL")
    dex_sandbox: Optional[bool] = Field(
        default=None,
        description="Force sandbox (true) or live (false) quotes; unset = sandbox outside production",
    )

    # ======================
    # Quote behaviour
    # ======================
    default_slippage: str = Field(default="0.5", description="Default slippage tolerance in percent")
    dex_catalog_timeout: float = Field(default=10.0, description="Timeout for chain/token lookups")
    dex_quote_timeout: float = Field(default=15.0, description="Timeout for quote requests")
    dex_swap_timeout: float = Field(default=30.0, description="Timeout for swap requests")
    sandbox_fee_factor: Decimal = Field(
        default=Decimal("0.997"), description="Output multiplier applied to sandbox quotes (0.3% fee)"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def sandbox_mode(self) -> bool:
        """Resolve the sandbox flag, defaulting to sandbox outside production."""
        if self.dex_sandbox is not None:
            return self.dex_sandbox
        return not self.is_production

    def dex_config(self) -> DexConfig:
        """Build the explicit DEX configuration passed to providers."""
        return DexConfig(
            api_key=self.okx_api_key,
            secret_key=self.okx_secret_key,
            passphrase=self.okx_passphrase,
            project_id=self.okx_project_id,
            base_url=self.okx_dex_base_url.rstrip("/"),
            sandbox=self.sandbox_mode,
            catalog_timeout=self.dex_catalog_timeout,
            quote_timeout=self.dex_quote_timeout,
            swap_timeout=self.dex_swap_timeout,
            default_slippage=self.default_slippage,
            sandbox_fee_factor=self.sandbox_fee_factor,
        )

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        config = self.dex_config()
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "database_url": self._redact_url(self.database_url),
            "dex": {
                "base_url": config.base_url,
                "mode": "sandbox" if config.use_sandbox else "live",
                "api_key": "***" if self.okx_api_key else "(not set)",
                "secret_key": "***" if self.okx_secret_key else "(not set)",
                "passphrase": "***" if self.okx_passphrase else "(not set)",
                "project_id": "***" if self.okx_project_id else "(not set)",
                "slippage": self.default_slippage,
            },
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact sensitive parts of database URL."""
        if "://" in url and "@" in url:
            proto, rest = url.split("://", 1)
            if "@" in rest:
                creds, host = rest.rsplit("@", 1)
                if ":" in creds:
                    user, _ = creds.split(":", 1)
                    return f"{proto}://{user}:***@{host}"
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
