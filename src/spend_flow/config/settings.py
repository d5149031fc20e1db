from pathlib import Path
import json
from typing import Dict, Any, Optional, Union

import yaml

from spend_flow.logging_setup import get_logger

logger = get_logger(__name__)

# Package defaults (bundled with code)
PACKAGE_CONFIG_DIR = Path(__file__).parent / "defaults"

# User configs (in project root, gitignored)
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
USER_CONFIG_DIR = PROJECT_ROOT / "config"

CONFIG_SUFFIXES = (".json", ".yml", ".yaml")

EMPTY_RULES: Dict[str, Any] = {"rules": {}}
EMPTY_OVERRIDES: Dict[str, Any] = {"overrides": {}, "narrative_contains": {}}

DEFAULT_SETTINGS: Dict[str, Any] = {
    "currency": "AUD",
    "output_dir": "data/processed",
    "publish_dir": "web/public",
}


def read_config_file(path: Union[Path, str]) -> Dict[str, Any]:
    """
    Read a JSON or YAML config file.

    Empty files and files whose top level isn't a mapping read as {}.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the suffix isn't supported
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    suffix = path.suffix.lower()
    with open(path, encoding="utf-8") as f:
        if suffix == ".json":
            data = json.load(f)
        elif suffix in (".yml", ".yaml"):
            data = yaml.safe_load(f)
        else:
            raise ValueError(
                f"Unsupported config format {suffix!r}, expected one of {CONFIG_SUFFIXES}"
            )

    if not isinstance(data, dict):
        return {}
    return data


class ConfigLoader:
    """Load configuration with user overrides"""

    @staticmethod
    def _candidates(directory: Path, config_name: str):
        stem = Path(config_name)
        if stem.suffix:
            yield directory / config_name
            return
        for suffix in CONFIG_SUFFIXES:
            yield directory / f"{config_name}{suffix}"

    @staticmethod
    def load_config(config_name: str) -> Dict[str, Any]:
        """
        Load config with fallback: user config -> default config

        Args:
            config_name: File name (e.g., 'settings.json') or a bare name
                ('categories') that is tried with each supported suffix.

        Raises:
            FileNotFoundError: If no config file was found

        Returns:
            Parsed configuration
        """
        searched = []
        for directory in (USER_CONFIG_DIR, PACKAGE_CONFIG_DIR):
            for path in ConfigLoader._candidates(directory, config_name):
                searched.append(path)
                if path.exists():
                    logger.debug("Loading config %s", path)
                    return read_config_file(path)

        raise FileNotFoundError(
            f"Config file '{config_name}' not found in:\n"
            + "\n".join(f" - {p}" for p in searched)
        )

    @staticmethod
    def _load_or_empty(
        path: Optional[Union[Path, str]],
        config_name: str,
        empty: Dict[str, Any],
    ) -> Dict[str, Any]:
        try:
            if path is not None:
                return read_config_file(path)
            return ConfigLoader.load_config(config_name)
        except FileNotFoundError:
            # No config yet - everything falls through to the default categories.
            logger.info("No %s config found, using empty configuration", config_name)
            return {key: dict(value) for key, value in empty.items()}

    @staticmethod
    def load_rules_config(path: Optional[Union[Path, str]] = None) -> Dict[str, Any]:
        """Load category rules, or empty rules when none exist"""
        return ConfigLoader._load_or_empty(path, "categories", EMPTY_RULES)

    @staticmethod
    def load_overrides_config(path: Optional[Union[Path, str]] = None) -> Dict[str, Any]:
        """Load id/narrative overrides, or empty overrides when none exist"""
        return ConfigLoader._load_or_empty(path, "overrides", EMPTY_OVERRIDES)

    @staticmethod
    def load_settings() -> Dict[str, Any]:
        """Load run settings merged over the built-in defaults"""
        settings = dict(DEFAULT_SETTINGS)
        try:
            settings.update(ConfigLoader.load_config("settings.json"))
        except FileNotFoundError:
            pass
        return settings

