"""
Environment Configuration

Loads the signing key and optional overrides from the process environment and
.env files, so secrets never live in the script presets.
"""

import os
import logging
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from testnet_cycler.core.error_handling import ConfigurationError

logger = logging.getLogger(__name__)

PRIVATE_KEY_VAR = "PRIVATE_KEY"
LOG_LEVEL_VAR = "LOG_LEVEL"

class EnvironmentManager:
    """
    Manages environment variables for the cycler.

    Features:
    - Loads from .env files
    - Supports environment-specific files (.env.development, .env.production)
    - Per-chain RPC overrides via <CHAIN>_RPC_URL
    """

    def __init__(self, env_name: Optional[str] = None, load_files: bool = True):
        self.env_name = env_name or os.getenv("APP_ENV", "development")
        if load_files:
            self.load_env_files()

        self._env_cache: Dict[str, Any] = {}

    def load_env_files(self) -> None:
        """Load environment variables from .env files"""
        # Base .env file
        load_dotenv()

        # Environment specific file (.env.development, .env.production, etc.)
        env_specific_path = f".env.{self.env_name}"
        if os.path.exists(env_specific_path):
            load_dotenv(env_specific_path)
            logger.info(f"Loaded environment specific config from {env_specific_path}")

        # Local overrides (not in version control)
        local_env_path = ".env.local"
        if os.path.exists(local_env_path):
            load_dotenv(local_env_path)
            logger.info(f"Loaded local environment overrides from {local_env_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """Get environment variable value with optional default"""
        if key in self._env_cache:
            return self._env_cache[key]

        value = os.getenv(key, default)
        self._env_cache[key] = value
        return value

    def private_key(self) -> str:
        """Signing key of the account that runs the cycles

        Raises:
            ConfigurationError: If PRIVATE_KEY is missing or empty
        """
        key = (self.get(PRIVATE_KEY_VAR) or "").strip()
        if not key:
            raise ConfigurationError(
                f"{PRIVATE_KEY_VAR} is not set. Add it to your environment or .env file"
            )
        if not key.startswith("0x"):
            key = f"0x{key}"
        return key

    def rpc_url_override(self, chain: str) -> Optional[str]:
        """RPC URL from <CHAIN>_RPC_URL, e.g. MONAD_TESTNET_RPC_URL"""
        var = f"{chain.upper().replace('-', '_')}_RPC_URL"
        value = self.get(var)
        return value.strip() if value else None

    def log_level(self, default: str = "INFO") -> str:
        return (self.get(LOG_LEVEL_VAR) or default).upper()

_env: Optional[EnvironmentManager] = None

def get_env_manager(env_name: Optional[str] = None) -> EnvironmentManager:
    """Get environment manager instance, created on first use"""
    global _env
    if _env is None or (env_name and env_name != _env.env_name):
        _env = EnvironmentManager(env_name)
    return _env
