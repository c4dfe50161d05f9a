# stachekit/config/__init__.py
from .settings import EngineConfig, DEFAULT_TEMPLATE_EXTENSION
from .loader import load_and_merge_configs, build_engine_config

__all__ = [
    "EngineConfig",
    "DEFAULT_TEMPLATE_EXTENSION",
    "load_and_merge_configs",
    "build_engine_config",
]
