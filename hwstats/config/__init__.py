from .settings import ConfigManager, get_config, initialize_config

__all__ = ['ConfigManager', 'get_config', 'initialize_config']
