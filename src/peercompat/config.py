"""Configuration management for peercompat."""

import os
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from peercompat.errors import ConfigurationError

CONFIG_FILENAMES = (".peercompat.yml", ".peercompat.yaml")
DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"


class DefaultPolicy(str, Enum):
    """Verdict for packages that show no framework signal at all."""

    ASSUME_COMPATIBLE = "assume_compatible"
    ASSUME_INCOMPATIBLE = "assume_incompatible"


class FrameworkConfig(BaseModel):
    """The host framework every dependency is checked against."""

    name: str = Field(default="Angular", description="Display label for notes and summary")
    default_major: int = Field(default=19, ge=1, description="Target major when --framework-major is not given")
    peer_names: list[str] = Field(
        default_factory=lambda: ["@angular/core", "angular"],
        description="peerDependencies keys naming the framework, in priority order",
    )
    excluded_prefixes: list[str] = Field(
        default_factory=lambda: ["@angular/"],
        description="Package name prefixes skipped when reading the manifest",
    )
    known_compatible: list[str] = Field(
        default_factory=lambda: [
            "rxjs", "zone.js", "tslib", "typescript",
            "lodash", "lodash-es", "moment", "date-fns",
            "jwt-decode", "ua-parser-js", "uuid",
            "@types/node", "@types/jest", "@types/jasmine",
            "jest", "jasmine", "karma", "protractor",
            "eslint", "prettier", "stylelint",
            "webpack", "rollup", "vite",
        ],
        description="Name prefixes of framework-agnostic or ecosystem-core packages",
    )
    ecosystem_tokens: list[str] = Field(
        default_factory=lambda: ["angular", "ng", "ngx"],
        description="Tokens in keywords/description marking a framework-related package",
    )
    utility_keywords: list[str] = Field(
        default_factory=lambda: ["utility", "util", "helper", "tool", "library", "polyfill"],
    )
    types_namespace: str = "@types/"
    default_policy: DefaultPolicy = DefaultPolicy.ASSUME_COMPATIBLE

    @field_validator("peer_names")
    @classmethod
    def validate_peer_names(cls, v: list[str]) -> list[str]:
        """Require at least one peer key."""
        if not v:
            raise ValueError("peer_names must name at least one package")
        return v


class RegistryConfig(BaseModel):
    """npm registry connection settings."""

    url: str = Field(default=DEFAULT_REGISTRY_URL)
    timeout: float = Field(default=30.0, gt=0, description="Socket timeout in seconds")
    request_deadline: float = Field(
        default=60.0,
        gt=0,
        description="Upper bound for one registry call, retries included",
    )
    max_retries: int = Field(default=3, ge=0)
    requests_per_second: float = Field(default=0, ge=0, description="0 disables rate limiting")
    token: str | None = Field(default=None, description="Bearer token (prefer NPM_TOKEN env var)")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate and normalize the registry URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("registry url must start with http:// or https://")
        return v.rstrip("/")


class ScanConfig(BaseModel):
    """Defaults for the scan flags."""

    jobs: int = Field(default=4, ge=1)
    fast_limit: int = Field(default=0, ge=0)
    exhaustive: bool = False
    include_prerelease: bool = False


class PeerCompatConfig(BaseModel):
    """Complete peercompat configuration."""

    version: int = Field(default=1, description="Configuration file version")
    framework: FrameworkConfig = Field(default_factory=FrameworkConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)
    migration_links: dict[str, str] = Field(default_factory=dict)


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find the nearest .peercompat.yml configuration file.

    Searches from start_path up to the root directory.

    Args:
        start_path: Starting directory for search (defaults to cwd).

    Returns:
        Path to config file if found, None otherwise.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while current != current.parent:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.exists():
                return config_path
        current = current.parent

    return None


def load_config(
    config_path: Path | None = None,
    env_prefix: str = "PEERCOMPAT_",
) -> PeerCompatConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file
    3. Defaults

    Args:
        config_path: Path to config file (searches if not provided).
        env_prefix: Prefix for environment variables.

    Returns:
        Loaded configuration.

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation.
    """
    config_data: dict[str, Any] = {}

    if config_path is None:
        config_path = find_config_file()

    if config_path and config_path.exists():
        try:
            with open(config_path) as f:
                file_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in {config_path}: {e}",
                hint="Run 'peercompat config init --force' to regenerate the file.",
            ) from e
        if file_data:
            if not isinstance(file_data, dict):
                raise ConfigurationError(f"Configuration in {config_path} must be a mapping")
            config_data = file_data

    registry_url = os.environ.get(f"{env_prefix}REGISTRY_URL")
    npm_token = os.environ.get("NPM_TOKEN")
    if registry_url or npm_token:
        registry = config_data.get("registry") or {}
        if not isinstance(registry, dict):
            raise ConfigurationError(
                f"The 'registry' section in {config_path} must be a mapping",
                hint="See 'peercompat config init' for an annotated example.",
            )
        if registry_url:
            registry["url"] = registry_url
        if npm_token:
            registry["token"] = npm_token
        config_data["registry"] = registry

    try:
        return PeerCompatConfig(**config_data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e}",
            hint="See 'peercompat config init' for an annotated example.",
        ) from e


def generate_example_config() -> str:
    """Generate an example configuration file.

    Returns:
        YAML string of example configuration.
    """
    example = """# peercompat configuration

version: 1

# Host framework every dependency is checked against
framework:
  name: Angular
  # Target major when --framework-major is not given
  default_major: 19
  # peerDependencies keys naming the framework, first match wins
  peer_names:
    - "@angular/core"
    - angular
  # Manifest entries skipped entirely
  excluded_prefixes:
    - "@angular/"
  # Verdict for packages with no peer range and no other signal:
  # assume_compatible or assume_incompatible
  default_policy: assume_compatible

# npm registry (token via NPM_TOKEN env var)
registry:
  url: https://registry.npmjs.org
  timeout: 30
  # Hard upper bound for a single registry call, retries included
  request_deadline: 60
  max_retries: 3
  # 0 = unlimited
  requests_per_second: 0

# Defaults for the check command flags
scan:
  jobs: 4
  # 0 = probe the full version history
  fast_limit: 0
  exhaustive: false
  include_prerelease: false

# Extra migration guide links (merged over the built-in table)
migration_links: {}
"""
    return example
