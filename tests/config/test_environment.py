import pytest

from testnet_cycler.config.environment import EnvironmentManager
from testnet_cycler.core.error_handling import ConfigurationError

KEY = "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"

@pytest.fixture
def env(monkeypatch):
    for var in ("PRIVATE_KEY", "LOG_LEVEL", "MONAD_TESTNET_RPC_URL"):
        monkeypatch.delenv(var, raising=False)
    return EnvironmentManager(load_files=False)

def test_private_key_gets_hex_prefix(env, monkeypatch):
    monkeypatch.setenv("PRIVATE_KEY", f"  {KEY}\n")
    assert env.private_key() == f"0x{KEY}"

def test_missing_private_key(env):
    with pytest.raises(ConfigurationError) as exc_info:
        env.private_key()
    assert "PRIVATE_KEY" in str(exc_info.value)

def test_rpc_url_override(env, monkeypatch):
    monkeypatch.setenv("MONAD_TESTNET_RPC_URL", "https://rpc.example/monad")
    assert env.rpc_url_override("monad-testnet") == "https://rpc.example/monad"
    assert env.rpc_url_override("megaeth-testnet") is None

def test_log_level(env, monkeypatch):
    assert env.log_level() == "INFO"
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert EnvironmentManager(load_files=False).log_level() == "DEBUG"

def test_loads_dotenv_file(tmp_path, monkeypatch):
    # Registers PRIVATE_KEY with monkeypatch so the value loaded below is undone
    monkeypatch.setenv("PRIVATE_KEY", "placeholder")
    monkeypatch.delenv("PRIVATE_KEY")
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env.local").write_text(f"PRIVATE_KEY=0x{KEY}\n")

    env = EnvironmentManager(env_name="test")

    assert env.private_key() == f"0x{KEY}"
