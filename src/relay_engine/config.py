"""Configuration

Settings are read from the environment (prefix ``RELAY_ENGINE_``, nested
fields separated by ``__``), from ``.env``, and optionally from a YAML file:
1. ``load_settings`` locates the YAML file
2. file values take priority over environment values
3. anything unset falls back to the defaults below (Sui testnet deployment)
"""

import os
import logging
from typing import Optional

import yaml
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "RELAY_ENGINE_CONFIG"


class LedgerSettings(BaseModel):
    """Ledger (Sui) settings"""
    network: str = "testnet"  # testnet, mainnet, devnet, localnet
    rpc_url: Optional[str] = None  # overrides the network's full node URL
    request_timeout: float = 30.0

    package_id: str = "0x4ed393ca28d4e62d864c49375d2981ab0d0d89f4b9ecc139c804fe008cea7d85"
    module: str = "jobs"

    # Shared objects
    pool_registry_id: str = "0x1302caa28d05f1840c14a5759f2e63f5a46c7d493178d3b3500d5fe43ae95f8e"
    job_registry_id: str = "0x89bf7e1413730788703c0b50fb4b96010fb43e8ba7a5fa1fc2266311e7dbe21c"
    admin_cap_id: str = "0xfceeb97dd759c83c3939e148a34d16cb3fc12915b6d78bfed23f0f2e4e4c6694"
    enclave_id: str = "0x06e385548bc3f9b157907fdf01f1d0c60f6614b0431b1cc0a84b3da4d5a02920"

    # Registry tables (dynamic field parents)
    jobs_table_id: str = "0xfd6bad71cdc8753f395538290c540c26fc417c451c39d0f8ee7e54db4762c16c"
    pool_users_table_id: str = "0x46ac9e7157473c72b52c96a47c737aa92ff1784837f50f7fd1d5ca54fa15ebfd"
    pool_data_table_id: str = "0xf73a9e758b78ab349005aefa731c1ad59860b7302cefb074e957247772b3912a"

    # Operator key, base64 Ed25519 secret
    admin_private_key: Optional[str] = None
    gas_budget: int = 50_000_000

    # How the model blob id string becomes vector<u8>: utf8 or hex
    model_blob_id_encoding: str = "utf8"

    def fullnode_url(self) -> str:
        if self.rpc_url:
            return self.rpc_url
        if self.network == "localnet":
            return "http://127.0.0.1:9000"
        return f"https://fullnode.{self.network}.sui.io:443"


class ComputeSettings(BaseModel):
    """Secure compute service settings"""
    url: str = "http://localhost:3000"
    timeout: Optional[float] = None  # None leaves the call unbounded


class PollerSettings(BaseModel):
    """Event polling settings"""
    interval: float = 5.0  # seconds between polls when caught up
    page_size: int = 50


class DispatcherSettings(BaseModel):
    """Ingestion -> pipeline handoff"""
    workers: int = 0  # 0 runs the pipeline inline in the polling loop
    shutdown_timeout: float = 10.0  # seconds to wait for each running job on stop


class DatabaseSettings(BaseModel):
    """Database settings (Pony ORM bind arguments)"""
    provider: str = "sqlite"
    filename: str = "relay_engine.sqlite"
    host: Optional[str] = None
    port: Optional[int] = None
    user: Optional[str] = None
    password: Optional[str] = None
    database: Optional[str] = None

    def bind_kwargs(self) -> dict:
        if self.provider == "sqlite":
            return {"provider": "sqlite", "filename": self.filename, "create_db": True}
        kwargs = {
            "provider": self.provider,
            "host": self.host,
            "user": self.user,
            "password": self.password,
            "database": self.database,
        }
        if self.port:
            kwargs["port"] = self.port
        return {k: v for k, v in kwargs.items() if v is not None}


class HealthSettings(BaseModel):
    """Health endpoint settings"""
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 8080


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    """Relay engine settings"""
    LEDGER: LedgerSettings = LedgerSettings()
    COMPUTE: ComputeSettings = ComputeSettings()
    POLLER: PollerSettings = PollerSettings()
    DISPATCHER: DispatcherSettings = DispatcherSettings()
    DATABASE: DatabaseSettings = DatabaseSettings()
    HEALTH: HealthSettings = HealthSettings()
    LOGGING: LoggingSettings = LoggingSettings()

    model_config = SettingsConfigDict(
        env_prefix="RELAY_ENGINE_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )


def load_settings(config_path: Optional[str] = None) -> Settings:
    """Load settings, merging an optional YAML file

    Args:
        config_path: YAML file path; defaults to ``$RELAY_ENGINE_CONFIG``

    Returns:
        Settings instance

    Raises:
        yaml.YAMLError: the file exists but is not valid YAML
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_ENV_VAR)
    if not config_path:
        return Settings()

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration from {config_path}")
    except FileNotFoundError:
        logger.warning(f"Config file not found: {config_path}, using default configuration")
        return Settings()
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse config file: {e}")
        raise

    # YAML keys are matched case-insensitively against the section names;
    # a section in the file only overrides the keys it names
    settings = Settings()
    overrides = {}
    for key, value in data.items():
        section = key.upper()
        current = getattr(settings, section, None)
        if isinstance(current, BaseModel) and isinstance(value, dict):
            value = {**current.model_dump(), **value}
        overrides[section] = value
    return Settings(**overrides)
