"""Configuration for the git source downloader: cache location and remote protocols"""

import configparser
import os
import platform
from pathlib import Path
from typing import Any, Dict, List, Optional

APP_NAME = "gitsource"

SECTION = "vcs"
KNOWN_PROTOCOLS = ("https", "ssh", "git")

_home = os.path.expanduser("~")

xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(_home, ".config")
xdg_cache_home = os.environ.get("XDG_CACHE_HOME") or os.path.join(_home, ".cache")


default_cfg = {
    SECTION: {
        "cache-vcs-dir": os.path.join(xdg_cache_home, APP_NAME, "vcs"),
        "github-protocols": "https, ssh, git",
        "github-domains": "github.com",
        "secure-http": "true",
    }
}

if platform.system() == "Darwin":
    # macOS
    config_dir = Path("~/Library/Application Support/gitsource").expanduser()
else:
    # Linux or others
    config_dir = Path(os.path.join(xdg_config_home, APP_NAME))


def get_config_file() -> Path:
    return config_dir / f"{APP_NAME}.cfg"


class ConfigAccessor:
    """
    A dict-like accessor for configuration files.

    This class provides a way to access configuration options with a dictionary-like
    interface while handling missing sections or keys gracefully.

    Usage:
        config = ConfigAccessor()
        value = config.get('vcs', 'cache-vcs-dir', default='')
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize a ConfigAccessor with an optional config file path.

        Args:
            config_path: Path to the configuration file. If None, uses the default path.
        """
        if config_path is None:
            self.config_path = get_config_file()
        else:
            self.config_path = Path(config_path)

        self.config = configparser.ConfigParser()
        if self.config_path.exists():
            self.config.read(self.config_path)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get a configuration value from the specified section and key.

        Args:
            section: The configuration section
            key: The configuration key
            default: Value to return if the section or key doesn't exist

        Returns:
            The configuration value if it exists, otherwise the default value
        """
        try:
            return self.config[section][key]
        except KeyError:
            return default


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.replace("\n", ",").split(",") if item.strip()]


def _parse_bool(key: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f'Config value "{key}" must be a boolean, got "{value}"')


class Config:
    """
    Read-only view of the [vcs] settings used by the downloader.

    Attributes:
        cache_vcs_dir: Root of the mirror cache. Empty disables caching.
        github_protocols: Ordered protocols tried for GitHub-hosted URLs.
        github_domains: Hosts whose URLs are treated as GitHub-style.
        secure_http: Refuse plain http:// and git:// candidate URLs.
    """

    def __init__(
        self,
        cache_vcs_dir: str = default_cfg[SECTION]["cache-vcs-dir"],
        github_protocols: Optional[List[str]] = None,
        github_domains: Optional[List[str]] = None,
        secure_http: bool = True,
    ):
        if github_protocols is None:
            github_protocols = _split_list(default_cfg[SECTION]["github-protocols"])
        if github_domains is None:
            github_domains = _split_list(default_cfg[SECTION]["github-domains"])

        if not isinstance(github_protocols, (list, tuple)):
            raise ValueError(
                f'Config value "github-protocols" must be a list, got {type(github_protocols).__name__}'
            )
        if not github_protocols:
            raise ValueError('Config value "github-protocols" must not be empty')
        unknown = [p for p in github_protocols if p not in KNOWN_PROTOCOLS]
        if unknown:
            raise ValueError(
                f'Config value "github-protocols" contains unknown protocols: {", ".join(unknown)}'
            )

        self.cache_vcs_dir = str(cache_vcs_dir or "")
        # Preserve order, drop duplicates
        self.github_protocols = list(dict.fromkeys(github_protocols))
        self.github_domains = list(github_domains)
        self.secure_http = secure_http

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "Config":
        """
        Build a configuration from a mapping keyed like the config file.

        List settings accept either a list or a comma-separated string.
        """
        kwargs: Dict[str, Any] = {}
        if "cache-vcs-dir" in values:
            kwargs["cache_vcs_dir"] = values["cache-vcs-dir"]
        for key in ("github-protocols", "github-domains"):
            if key in values:
                value = values[key]
                if isinstance(value, str):
                    value = _split_list(value)
                kwargs[key.replace("-", "_")] = value
        if "secure-http" in values:
            value = values["secure-http"]
            if isinstance(value, str):
                value = _parse_bool("secure-http", value)
            kwargs["secure_http"] = bool(value)
        return cls(**kwargs)

    @classmethod
    def load(cls, accessor: Optional[ConfigAccessor] = None) -> "Config":
        """Read the [vcs] section of the user configuration file."""
        if accessor is None:
            accessor = ConfigAccessor()
        values = {
            key: accessor.get(SECTION, key, default)
            for key, default in default_cfg[SECTION].items()
        }
        return cls.from_dict(values)

    def __repr__(self) -> str:
        return (
            f"Config(cache_vcs_dir={self.cache_vcs_dir!r}, "
            f"github_protocols={self.github_protocols!r}, "
            f"github_domains={self.github_domains!r}, "
            f"secure_http={self.secure_http!r})"
        )
