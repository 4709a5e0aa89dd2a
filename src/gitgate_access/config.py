"""Access configuration loader with Pydantic v2 validation.

Loads and validates a ``gitgate.yaml`` file into a typed
:class:`AccessConfig`.  Every path in the file may be relative, in which
case it is resolved against ``admin_base``.

Example
-------
>>> loader = ConfigLoader()
>>> config = loader.load_string("admin_base: /srv/gitgate")
>>> config.registry_path
PosixPath('/srv/gitgate/conf/rule_info')
"""
from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from gitgate_access.errors import ConfigurationError

DEFAULT_ADMIN_BASE = Path("~/.gitgate")


class AccessConfig(BaseModel):
    """Top-level access-query configuration.

    All fields are optional and fall back to the conventional admin-base
    layout::

        <admin_base>/
            conf/rule_info      rule registry
            conf/*.conf         configuration sources named by the registry
            conf/rules.yaml     compiled rule base (reference evaluator)
            repositories/       bare repositories (existence checks)
    """

    model_config = {"extra": "allow"}

    admin_base: Path = Field(default=DEFAULT_ADMIN_BASE, validate_default=True)
    registry_file: Path = Field(default=Path("conf/rule_info"))
    conf_dir: Path = Field(default=Path("conf"))
    rules_file: Path = Field(default=Path("conf/rules.yaml"))
    repo_base: Path = Field(default=Path("repositories"))
    evaluator: str = Field(default="rulebase", min_length=1)
    virtual_ref_prefixes: list[str] = Field(default_factory=lambda: ["VREF/"])

    @field_validator("admin_base")
    @classmethod
    def expand_admin_base(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("virtual_ref_prefixes")
    @classmethod
    def validate_prefixes(cls, values: list[str]) -> list[str]:
        for prefix in values:
            if not prefix.endswith("/"):
                raise ValueError(f"Virtual ref prefix '{prefix}' must end with '/'")
        return values

    def _under_base(self, path: Path) -> Path:
        return path if path.is_absolute() else self.admin_base / path

    @property
    def registry_path(self) -> Path:
        """Absolute location of the rule registry."""
        return self._under_base(self.registry_file)

    @property
    def conf_path(self) -> Path:
        """Directory that registry file identifiers are relative to."""
        return self._under_base(self.conf_dir)

    @property
    def rules_path(self) -> Path:
        """Rule-base file read by the reference evaluator."""
        return self._under_base(self.rules_file)

    @property
    def repo_path(self) -> Path:
        """Directory holding bare repositories, for existence checks."""
        return self._under_base(self.repo_base)


class ConfigLoader:
    """Loads and validates access configuration YAML.

    Example
    -------
    >>> loader = ConfigLoader()
    >>> config = loader.load(Path("gitgate.yaml"))
    """

    def load(self, config_path: Path) -> AccessConfig:
        """Load and validate an access configuration file.

        Parameters
        ----------
        config_path:
            Path to the ``gitgate.yaml`` file.

        Returns
        -------
        AccessConfig
            Validated configuration object.

        Raises
        ------
        FileNotFoundError:
            When the config file does not exist.
        ConfigurationError:
            When the YAML cannot be parsed or fails validation.
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Access config not found: {config_path}")

        with config_path.open("r", encoding="utf-8") as fh:
            return self._validate(fh.read(), source=str(config_path))

    def load_string(self, yaml_content: str) -> AccessConfig:
        """Load and validate a YAML string directly."""
        return self._validate(yaml_content, source="<string>")

    def defaults(self) -> AccessConfig:
        """Return a configuration with all defaults applied."""
        return AccessConfig()

    def _validate(self, yaml_content: str, source: str) -> AccessConfig:
        try:
            raw = yaml.safe_load(yaml_content) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"[{source}] Failed to parse YAML: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigurationError(f"[{source}] Access config must be a YAML mapping.")
        try:
            return AccessConfig.model_validate(raw)
        except ValidationError as exc:
            raise ConfigurationError(f"[{source}] {exc}") from exc
