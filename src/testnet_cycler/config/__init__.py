"""
Configuration

Chain specifications, script presets and environment loading.
"""

from .chain_specs import ChainSpec, CHAIN_SPECS, get_chain_spec
from .scripts import ScriptConfig, SCRIPTS, get_script, get_all_scripts
from .environment import EnvironmentManager, get_env_manager

__all__ = [
    'ChainSpec',
    'CHAIN_SPECS',
    'get_chain_spec',
    'ScriptConfig',
    'SCRIPTS',
    'get_script',
    'get_all_scripts',
    'EnvironmentManager',
    'get_env_manager'
]
