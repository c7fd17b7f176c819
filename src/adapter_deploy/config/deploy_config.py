"""
Deploy configuration.

Built once at startup from an optional YAML file and the environment
(environment wins), validated up-front, then passed explicitly to each
component.
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from ..contracts.models import PublishMode
from ..errors import ConfigError

# field name -> environment variable
ENV_VARS: Dict[str, str] = {
    "account_id": "CLOUDFLARE_ACCOUNT_ID",
    "access_key_id": "AWS_ACCESS_KEY_ID",
    "secret_access_key": "AWS_SECRET_ACCESS_KEY",
    "bucket": "R2_ADAPTERS_BUCKET",
    "public_url": "R2_PUBLIC_URL",
    "sync_endpoint": "SYNC_ENDPOINT",
    "sync_token": "SYNC_TOKEN",
    "endpoint_url": "S3_ENDPOINT_URL",
    "mode": "ADAPTER_DEPLOY_MODE",
    "adapters_root": "ADAPTER_DEPLOY_ROOT",
    "package_manager": "ADAPTER_DEPLOY_PACKAGE_MANAGER",
    "conditional_writes": "ADAPTER_DEPLOY_CONDITIONAL_WRITES",
}

# Never read from a config file; these only come from the environment.
SECRET_FIELDS = ("access_key_id", "secret_access_key", "sync_token")

STORE_FIELDS = ("access_key_id", "secret_access_key", "bucket")
VERSIONED_FIELDS = ("public_url", "sync_endpoint", "sync_token")


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"not a boolean: {value!r}")


@dataclass
class DeployConfig:
    """Everything the deploy needs to know, resolved once."""

    # Object store
    account_id: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    bucket: str = ""
    endpoint_url: str = ""
    region: str = "auto"
    conditional_writes: bool = True

    # Public URLs and registry
    public_url: str = ""
    sync_endpoint: str = ""
    sync_token: str = ""
    sync_timeout: int = 30

    # Repository layout
    mode: PublishMode = PublishMode.versioned
    adapters_root: str = "adapters"
    package_manager: str = "bun"
    descriptor_path: str = "src/adapter.json"
    artifact_path: str = "dist/index.js"
    icon_path: str = "src/icon.png"

    @property
    def versioned(self) -> bool:
        return self.mode == PublishMode.versioned

    @property
    def resolved_endpoint_url(self) -> str:
        if self.endpoint_url:
            return self.endpoint_url
        return f"https://{self.account_id}.r2.cloudflarestorage.com"

    @classmethod
    def from_sources(
        cls,
        config_file: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> "DeployConfig":
        """Merge file, environment and explicit overrides (later wins).

        Values are coerced but not validated; call validate() afterwards.

        Raises:
            ConfigError: If a value cannot be parsed or the file is unusable
        """
        environ = os.environ if environ is None else environ
        raw: Dict[str, Any] = {}
        if config_file is not None:
            raw.update(cls._read_file(config_file))

        for name, var in ENV_VARS.items():
            value = environ.get(var)
            if value is not None and value != "":
                raw[name] = value

        raw.update({k: v for k, v in overrides.items() if v is not None})
        return cls._coerce(raw)

    @staticmethod
    def _read_file(config_file: Path) -> Dict[str, Any]:
        try:
            with open(config_file, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            raise ConfigError([f"config file not found: {config_file}"]) from None
        except yaml.YAMLError as e:
            raise ConfigError([f"invalid YAML in {config_file}: {e}"]) from e
        if not isinstance(data, dict):
            raise ConfigError([f"{config_file} must contain a mapping"])

        known = {f.name for f in fields(DeployConfig)}
        problems = [f"unknown setting '{k}' in {config_file}" for k in data if k not in known]
        problems += [
            f"'{k}' must come from the environment ({ENV_VARS[k]}), not {config_file}"
            for k in data
            if k in SECRET_FIELDS
        ]
        if problems:
            raise ConfigError(problems)
        return data

    @classmethod
    def _coerce(cls, raw: Dict[str, Any]) -> "DeployConfig":
        problems: List[str] = []
        values: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in raw:
                continue
            value = raw[f.name]
            try:
                if f.name == "mode":
                    if not isinstance(value, PublishMode):
                        value = PublishMode(str(value).strip().lower())
                elif f.name == "conditional_writes":
                    value = _parse_bool(value)
                elif f.name == "sync_timeout":
                    value = int(value)
                else:
                    value = str(value).strip()
            except ValueError as e:
                problems.append(f"invalid value for {f.name}: {e}")
                continue
            values[f.name] = value
        if problems:
            raise ConfigError(problems)
        return cls(**values)

    def validate(self, require_store: bool = True) -> List[str]:
        """Validate configuration and return list of errors."""
        errors: List[str] = []

        def missing(name: str) -> None:
            errors.append(f"{ENV_VARS.get(name, name)} is not set")

        if require_store:
            for name in STORE_FIELDS:
                if not getattr(self, name):
                    missing(name)
            if not self.account_id and not self.endpoint_url:
                errors.append(
                    f"{ENV_VARS['account_id']} is not set (or set {ENV_VARS['endpoint_url']})"
                )
            if self.versioned:
                for name in VERSIONED_FIELDS:
                    if not getattr(self, name):
                        missing(name)

        if self.package_manager not in ("bun", "npm", "pnpm"):
            errors.append(f"unsupported package manager: {self.package_manager}")

        root = Path(self.adapters_root)
        if not self.adapters_root or root.is_absolute() or ".." in root.parts:
            errors.append(f"adapters root must be a relative path: {self.adapters_root!r}")

        if self.sync_timeout <= 0:
            errors.append("sync_timeout must be positive")

        return errors

    def require_valid(self, require_store: bool = True) -> "DeployConfig":
        errors = self.validate(require_store=require_store)
        if errors:
            raise ConfigError(errors)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary with secrets masked."""
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in SECRET_FIELDS and value:
                value = "***"
            elif isinstance(value, PublishMode):
                value = value.value
            data[f.name] = value
        return data


def load_config(
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    require_store: bool = True,
    **overrides: Any,
) -> DeployConfig:
    """Build and validate the deploy configuration in one step.

    Raises:
        ConfigError: Listing every problem found
    """
    config = DeployConfig.from_sources(config_file, environ, **overrides)
    return config.require_valid(require_store=require_store)
