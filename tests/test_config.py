import pytest
import yaml

from relay_engine.config import Settings, load_settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("RELAY_ENGINE_CONFIG", raising=False)
    settings = load_settings()
    assert settings.LEDGER.network == "testnet"
    assert settings.LEDGER.fullnode_url() == "https://fullnode.testnet.sui.io:443"
    assert settings.POLLER.interval == 5.0
    assert settings.DISPATCHER.workers == 0
    assert settings.COMPUTE.timeout is None


def test_yaml_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "ledger:\n"
        "  network: localnet\n"
        "  package_id: '0xpkg'\n"
        "poller:\n"
        "  interval: 1\n"
        "database:\n"
        "  filename: /tmp/relay.sqlite\n"
    )
    settings = load_settings(str(path))
    assert settings.LEDGER.fullnode_url() == "http://127.0.0.1:9000"
    assert settings.LEDGER.package_id == "0xpkg"
    assert settings.POLLER.interval == 1.0
    assert settings.DATABASE.bind_kwargs() == {
        "provider": "sqlite", "filename": "/tmp/relay.sqlite", "create_db": True,
    }


def test_config_path_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("compute:\n  url: http://enclave:3000\n")
    monkeypatch.setenv("RELAY_ENGINE_CONFIG", str(path))
    assert load_settings().COMPUTE.url == "http://enclave:3000"


def test_missing_file_falls_back_to_defaults(tmp_path):
    settings = load_settings(str(tmp_path / "missing.yaml"))
    assert settings.LEDGER.module == "jobs"


def test_invalid_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("ledger: [unclosed\n")
    with pytest.raises(yaml.YAMLError):
        load_settings(str(path))


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("RELAY_ENGINE_LEDGER__RPC_URL", "http://node:9000")
    monkeypatch.setenv("RELAY_ENGINE_DISPATCHER__WORKERS", "4")
    settings = Settings()
    assert settings.LEDGER.fullnode_url() == "http://node:9000"
    assert settings.DISPATCHER.workers == 4


def test_database_bind_kwargs_for_server_providers():
    settings = Settings(DATABASE={
        "provider": "postgres", "host": "db", "user": "relay", "password": "secret",
        "database": "relay",
    })
    assert settings.DATABASE.bind_kwargs() == {
        "provider": "postgres", "host": "db", "user": "relay", "password": "secret",
        "database": "relay",
    }


def test_yaml_section_keeps_environment_keys(tmp_path, monkeypatch):
    monkeypatch.setenv("RELAY_ENGINE_LEDGER__ADMIN_PRIVATE_KEY", "c2VjcmV0")
    monkeypatch.setenv("RELAY_ENGINE_LEDGER__NETWORK", "devnet")
    path = tmp_path / "config.yaml"
    path.write_text("ledger:\n  network: localnet\n  package_id: '0xpkg'\n")

    settings = load_settings(str(path))
    assert settings.LEDGER.admin_private_key == "c2VjcmV0"
    assert settings.LEDGER.network == "localnet"
    assert settings.LEDGER.package_id == "0xpkg"


def test_health_and_compute_ports_differ():
    settings = Settings()
    assert settings.COMPUTE.url == "http://localhost:3000"
    assert settings.HEALTH.port != 3000
