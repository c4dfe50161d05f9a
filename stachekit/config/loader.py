# stachekit/config/loader.py
"""
Handles loading and merging of engine configuration from TOML files.
"""
import toml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import fields as dataclass_fields
import structlog

from stachekit.exceptions import ConfigError

from .settings import EngineConfig

log = structlog.get_logger(__name__)

PROJECT_CONFIG_FILENAMES = [".stachekit.toml", "stachekit.toml", "pyproject.toml"]
USER_CONFIG_DIR = Path.home() / ".config" / "stachekit"
USER_CONFIG_FILE = USER_CONFIG_DIR / "config.toml"

# toml key -> EngineConfig attribute
CONFIG_KEY_TO_ENGINECONFIG_ATTR_MAP: Dict[str, str] = {
    "template_path": "template_path",
    "templates": "template_path",
    "template_extension": "template_extension",
    "extension": "template_extension",
    "missing_as_empty": "missing_as_empty",
    "warn_missing_keys": "warn_missing_keys",
}

_ATTR_TYPES = {
    "template_path": (str,),
    "template_extension": (str,),
    "missing_as_empty": (bool,),
    "warn_missing_keys": (bool,),
}

def _load_toml_file_data(file_path: Path) -> Dict[str, Any]:
    if not file_path.is_file(): return {}
    log.debug("loading_toml_config_file", path=str(file_path))
    try:
        data = toml.load(file_path)
    except toml.TomlDecodeError as e:
        raise ConfigError(f"could not parse config file {file_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"could not read config file {file_path}: {e}") from e
    return data.get("tool", {}).get("stachekit", {}) if file_path.name == "pyproject.toml" else data

def load_and_merge_configs(project_dir: Optional[Path] = None) -> Dict[str, Any]:
    """
    loads user-global then project-local configuration.
    the first project file found in `project_dir` (default: cwd) overrides user values.
    """
    merged_toml_data: Dict[str, Any] = {}
    if USER_CONFIG_FILE.is_file():
        log.info("loading_user_global_config", path=str(USER_CONFIG_FILE))
        merged_toml_data.update(_load_toml_file_data(USER_CONFIG_FILE))

    search_dir = project_dir if project_dir is not None else Path.cwd()
    for filename in PROJECT_CONFIG_FILENAMES:
        candidate = search_dir / filename
        if candidate.is_file():
            project_settings = _load_toml_file_data(candidate)
            if project_settings:
                log.info("loading_project_local_config", path=str(candidate))
                merged_toml_data.update(project_settings)
                break
    if not merged_toml_data: log.debug("no_configuration_files_loaded")
    return merged_toml_data

def build_engine_config(raw_config: Optional[Dict[str, Any]] = None, **overrides: Any) -> EngineConfig:
    """
    builds an EngineConfig from raw toml data, then applies non-None keyword overrides.
    unknown toml keys are ignored with a warning; wrongly typed values raise ConfigError.
    """
    options: Dict[str, Any] = {}
    for toml_key, value in (raw_config or {}).items():
        attr = CONFIG_KEY_TO_ENGINECONFIG_ATTR_MAP.get(toml_key)
        if attr is None:
            log.warning("unknown_config_key_ignored", key=toml_key)
            continue
        if not isinstance(value, _ATTR_TYPES[attr]):
            raise ConfigError(f"config key '{toml_key}' expects {_ATTR_TYPES[attr][0].__name__}, got {type(value).__name__}")
        options[attr] = value

    valid_attrs = {f.name for f in dataclass_fields(EngineConfig) if f.init}
    for attr, value in overrides.items():
        if attr not in valid_attrs:
            raise ConfigError(f"unknown engine option '{attr}'")
        if value is not None:
            options[attr] = value

    config = EngineConfig(**options)
    log.debug("engine_config_built", template_path=str(config.template_path),
              template_extension=config.template_extension, missing_as_empty=config.missing_as_empty)
    return config
