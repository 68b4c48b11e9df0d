"""
Configuration management for BMK.

Settings come from TOML files and ``BMK_*`` environment variables, layered
over the defaults below. Later sources win:

    defaults < ~/.config/bmk/config.toml < ./bmk.toml (or ./.bmkrc,
    ./.bmk/config.toml) < --config FILE < BMK_* variables < CLI flags
"""
import os
import logging
import tomli
import tomli_w
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field, asdict, fields

from bmk.constants import (
    DEFAULT_DATA_DIR,
    DEFAULT_IMPORT_DELAY,
    DEFAULT_REQUEST_TIMEOUT,
    METADATA_USER_AGENT,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "BMK_"

# Checked in order; only the first one found is read
LOCAL_CONFIG_FILES = ("bmk.toml", ".bmkrc", ".bmk/config.toml")

TRUE_VALUES = ("true", "1", "yes", "on")


def user_config_path() -> Path:
    return Path.home() / ".config" / "bmk" / "config.toml"


def find_local_config(directory: Optional[Path] = None) -> Optional[Path]:
    directory = directory or Path.cwd()
    for name in LOCAL_CONFIG_FILES:
        candidate = directory / name
        if candidate.exists():
            return candidate
    return None


@dataclass
class BmkConfig:
    """BMK settings. Every field can be set from TOML or as ``BMK_<FIELD>``."""

    # Where bookmarks.json, collections.json and tags.json live
    data_dir: str = DEFAULT_DATA_DIR

    # Metadata fetching
    timeout: int = DEFAULT_REQUEST_TIMEOUT
    user_agent: str = METADATA_USER_AGENT
    import_delay: float = DEFAULT_IMPORT_DELAY

    # Listing and display
    sort_by: str = "newest"
    show_descriptions: bool = True
    confirm_delete: bool = True
    output_format: str = "table"
    color_output: bool = True

    # Export
    export_format: str = "html"
    export_collection_ids: List[str] = field(default_factory=list)

    log_level: str = "INFO"

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> "BmkConfig":
        """
        Build a configuration from every source in priority order.

        Args:
            config_file: Extra TOML file read after the user and local files

        Returns:
            Merged configuration
        """
        config = cls()

        sources = [user_config_path(), find_local_config(), config_file]
        for path in sources:
            if path is not None and path.exists():
                config.update(read_toml(path), source=str(path))

        for key, value in os.environ.items():
            if key.startswith(ENV_PREFIX):
                name = key[len(ENV_PREFIX):].lower()
                if name in config.field_names():
                    config.set_value(name, value)

        config.data_dir = os.path.expanduser(os.path.expandvars(config.data_dir))
        return config

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    def update(self, data: Dict[str, Any], source: str = "") -> None:
        """Copy known keys from ``data``; unknown keys are logged and skipped."""
        known = self.field_names()
        for key, value in data.items():
            if key in known:
                setattr(self, key, value)
            else:
                logger.warning(f"Ignoring unknown config key '{key}' in {source or 'config'}")

    def set_value(self, key: str, value: str):
        """
        Set a field from its string form, converting to the field's type.

        Raises:
            KeyError: If key is not a configuration field
            ValueError: If value cannot be converted
        """
        if key not in self.field_names():
            raise KeyError(f"Unknown config key: {key}")

        # Declared type, not the current value's: TOML may have stored 1 for a float
        declared = {f.name: f.type for f in fields(self)}[key]
        if declared is bool:
            converted = value.strip().lower() in TRUE_VALUES
        elif declared is int:
            converted = int(value)
        elif declared is float:
            converted = float(value)
        elif getattr(declared, "__origin__", None) is list:
            converted = [v.strip() for v in value.split(",") if v.strip()]
        else:
            converted = value
        setattr(self, key, converted)

    def save(self, path: Optional[Path] = None) -> Path:
        """Write the configuration as TOML (default: the user config file)."""
        path = Path(path) if path else user_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            tomli_w.dump(asdict(self), f)
        logger.debug(f"Saved config to {path}")
        return path

    def get_data_path(self) -> Path:
        """The data directory as an absolute path."""
        return (Path.cwd() / self.data_dir) if not Path(self.data_dir).is_absolute() \
            else Path(self.data_dir)


def read_toml(path: Path) -> Dict[str, Any]:
    with open(path, "rb") as f:
        return tomli.load(f)


_config: Optional[BmkConfig] = None


def get_config(reload: bool = False, config_file: Optional[Path] = None) -> BmkConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None or reload:
        _config = BmkConfig.load(config_file)
    return _config


def init_config(data_dir: Optional[str] = None, config_file: Optional[Path] = None,
                **overrides) -> BmkConfig:
    """
    Load configuration and apply command-line overrides.

    ``None`` overrides are ignored so unset flags keep the configured value.
    Passing ``config_file`` forces a reload.
    """
    config = get_config(reload=config_file is not None, config_file=config_file)

    if data_dir:
        config.data_dir = data_dir
    for key, value in overrides.items():
        if value is not None and key in config.field_names():
            setattr(config, key, value)
    return config
