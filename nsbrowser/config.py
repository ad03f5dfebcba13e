"""
Configuration — Centralized settings management

Config hierarchy (highest to lowest priority):
  1. Environment variables (NSB_NAMESPACE_MODE, NSB_MEMBER_MODE,
     NSB_DOC_FACET, NSB_SYMBOLS)
  2. Project config (.nsbrowser/config.yaml)
  3. User config (~/.nsbrowser/config.yaml)
  4. Defaults

Worker pool settings are read separately by OrchestratorConfig.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .core.model import DocFacet, MemberMode, NamespaceMode

log = logging.getLogger(__name__)


ENV_OVERRIDES = {
    "NSB_NAMESPACE_MODE": ("browser", "namespace_mode"),
    "NSB_MEMBER_MODE": ("browser", "member_mode"),
    "NSB_DOC_FACET": ("browser", "doc_facet"),
    "NSB_SYMBOLS": ("display", "symbols"),
}


@dataclass
class BrowserSettings:
    """Initial modes and filter cache size."""
    namespace_mode: str = NamespaceMode.LOADED.value
    member_mode: str = MemberMode.PUBLICS.value
    doc_facet: str = DocFacet.DOC.value
    pattern_cache_size: int = 64

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        for enum_cls, value in (
            (NamespaceMode, self.namespace_mode),
            (MemberMode, self.member_mode),
            (DocFacet, self.doc_facet),
        ):
            try:
                enum_cls.parse(value)
            except ValueError as e:
                return str(e)
        if self.pattern_cache_size < 1:
            return f"pattern_cache_size must be >= 1, got {self.pattern_cache_size}"
        return None


@dataclass
class DisplayConfig:
    """Display preferences."""
    symbols: str = "auto"  # "unicode" | "ascii" | "auto"
    format: str = "text"   # "text" | "json"

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        valid_symbols = ("unicode", "ascii", "auto")
        if self.symbols not in valid_symbols:
            return f"Unknown symbols setting '{self.symbols}'. Valid: {', '.join(valid_symbols)}"

        valid_formats = ("text", "json")
        if self.format not in valid_formats:
            return f"Unknown format '{self.format}'. Valid: {', '.join(valid_formats)}"
        return None


@dataclass
class Config:
    """Application configuration."""
    browser: BrowserSettings = field(default_factory=BrowserSettings)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    def validate(self) -> Optional[str]:
        return self.browser.validate() or self.display.validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "browser": {
                "namespace_mode": self.browser.namespace_mode,
                "member_mode": self.browser.member_mode,
                "doc_facet": self.browser.doc_facet,
                "pattern_cache_size": self.browser.pattern_cache_size,
            },
            "display": {
                "symbols": self.display.symbols,
                "format": self.display.format,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary."""
        browser_data = data.get("browser", {}) or {}
        display_data = data.get("display", {}) or {}
        defaults = BrowserSettings()

        return cls(
            browser=BrowserSettings(
                namespace_mode=str(browser_data.get("namespace_mode", defaults.namespace_mode)),
                member_mode=str(browser_data.get("member_mode", defaults.member_mode)),
                doc_facet=str(browser_data.get("doc_facet", defaults.doc_facet)),
                pattern_cache_size=int(browser_data.get("pattern_cache_size", defaults.pattern_cache_size)),
            ),
            display=DisplayConfig(
                symbols=str(display_data.get("symbols", "auto")),
                format=str(display_data.get("format", "text")),
            ),
        )


class ConfigManager:
    """
    Manages configuration loading and persistence.

    Hierarchy:
      1. Environment
      2. Project config (.nsbrowser/config.yaml)
      3. User config (~/.nsbrowser/config.yaml)
      4. Defaults
    """

    USER_CONFIG_DIR = Path.home() / ".nsbrowser"
    USER_CONFIG_FILE = USER_CONFIG_DIR / "config.yaml"
    PROJECT_CONFIG_DIR = ".nsbrowser"
    PROJECT_CONFIG_FILE = "config.yaml"

    def __init__(self, project_dir: Optional[Path] = None, user_dir: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self.user_dir = Path(user_dir) if user_dir else self.USER_CONFIG_DIR
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / self.PROJECT_CONFIG_DIR / self.PROJECT_CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self.user_dir / self.PROJECT_CONFIG_FILE

    def load(self) -> Config:
        """Load configuration from all sources."""
        if self._config is not None:
            return self._config

        config_data: Dict[str, Any] = {}

        # Layer 1: User config
        config_data = self._merge(config_data, self._read(self.user_config_path))

        # Layer 2: Project config (higher priority)
        config_data = self._merge(config_data, self._read(self.project_config_path))

        # Layer 3: Environment overrides
        for env_key, (section, setting) in ENV_OVERRIDES.items():
            if os.environ.get(env_key):
                config_data.setdefault(section, {})[setting] = os.environ[env_key]

        try:
            config = Config.from_dict(config_data)
            error = config.validate()
        except (TypeError, ValueError, AttributeError) as e:
            config, error = None, str(e)
        if error:
            log.warning("Ignoring invalid configuration (%s); using defaults", error)
            config = Config()

        self._config = config
        return self._config

    def save_project(self, config: Config):
        """Save configuration to project config file."""
        self._write(self.project_config_path, config)

    def save_user(self, config: Config):
        """Save configuration to user config file."""
        self._write(self.user_config_path, config)

    def set(self, key: str, value: str, scope: str = "project") -> Optional[str]:
        """
        Set a configuration value.

        Args:
            key: Dot-separated key (e.g., "browser.member_mode")
            value: Value to set
            scope: "project" or "user"

        Returns:
            Error message or None if successful
        """
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return f"Invalid key format: {key}. Use 'section.setting' (e.g., 'browser.member_mode')"

        section, setting = parts

        if section == "browser":
            if setting in ("namespace_mode", "member_mode", "doc_facet"):
                setattr(config.browser, setting, value)
            elif setting == "pattern_cache_size":
                try:
                    config.browser.pattern_cache_size = int(value)
                except ValueError:
                    return f"pattern_cache_size must be an integer, got '{value}'"
            else:
                return f"Unknown browser setting: {setting}. Valid: namespace_mode, member_mode, doc_facet, pattern_cache_size"
            error = config.browser.validate()
        elif section == "display":
            if setting in ("symbols", "format"):
                setattr(config.display, setting, value)
            else:
                return f"Unknown display setting: {setting}. Valid: symbols, format"
            error = config.display.validate()
        else:
            return f"Unknown section: {section}. Valid: browser, display"

        if error:
            self._config = None
            return error

        if scope == "project":
            self.save_project(config)
        else:
            self.save_user(config)
        return None

    def get(self, key: str) -> Optional[str]:
        """Get a configuration value."""
        section, _, setting = key.partition(".")
        value = self.load().to_dict().get(section, {}).get(setting)
        return None if value is None else str(value)

    def display(self) -> str:
        """Format config for display."""
        config = self.load()
        lines = [
            "Configuration:",
            "",
            "Browser:",
            f"  Namespace mode: {config.browser.namespace_mode}",
            f"  Member mode: {config.browser.member_mode}",
            f"  Doc facet: {config.browser.doc_facet}",
            f"  Pattern cache: {config.browser.pattern_cache_size}",
            "",
            "Display:",
            f"  Symbols: {config.display.symbols}",
            f"  Format: {config.display.format}",
            "",
            "Config files:",
            f"  User: {self.user_config_path}",
            f"  Project: {self.project_config_path}",
        ]
        return "\n".join(lines)

    def _read(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            log.warning("Ignoring unreadable config %s: %s", path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, path: Path, config: Config):
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)
        self._config = config

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result


def get_config(project_dir: Optional[Path] = None) -> Config:
    """Load configuration for a project."""
    return ConfigManager(project_dir).load()
