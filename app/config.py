"""Directory settings file (YAML) -> DirectoryConfig.

Key names follow the settings.yaml the service has always used:

    server: dc01.example.com
    port: 389
    searchuser: CN=svc,OU=Service Accounts,DC=example,DC=com
    searchpass: secret
    basedn: DC=example,DC=com
    searchattr: uidNumber

Optional keys: starttls, tls_validate, ca_file, connect_timeout_s,
search_timeout_s, reject_ambiguous_id.
"""
from __future__ import annotations

import logging
import os

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .ad.errors import ConfigError
from .ad.models import DirectoryConfig

logger = logging.getLogger(__name__)


class DirectorySettingsSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    server: str = Field(..., min_length=1, max_length=255)
    port: int = Field(..., ge=1, le=65535)
    searchuser: str = Field(..., min_length=1)
    searchpass: str = Field(..., min_length=1)
    basedn: str = Field(..., min_length=1)
    searchattr: str = Field(..., min_length=1, max_length=128)

    starttls: bool = Field(default=True)
    tls_validate: bool = Field(default=True)
    ca_file: str = Field(default="")
    connect_timeout_s: float = Field(default=10.0, gt=0, le=300)
    search_timeout_s: float = Field(default=30.0, gt=0, le=3600)
    reject_ambiguous_id: bool = Field(default=False)

    @field_validator("server", "searchuser", "basedn", "searchattr", "ca_file", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("searchattr")
    @classmethod
    def _validate_attr(cls, v: str) -> str:
        # Attribute descriptions are keystrings or OIDs; nothing that could break a filter.
        if any(ch in v for ch in "()*=\\ \x00"):
            raise ValueError("searchattr must be a plain attribute name")
        return v

    def to_config(self) -> DirectoryConfig:
        return DirectoryConfig(
            server=self.server,
            port=self.port,
            search_user=self.searchuser,
            search_pass=self.searchpass,
            base_dn=self.basedn,
            search_attr=self.searchattr,
            starttls=self.starttls,
            tls_validate=self.tls_validate,
            ca_file=self.ca_file,
            connect_timeout_s=self.connect_timeout_s,
            search_timeout_s=self.search_timeout_s,
            reject_ambiguous_id=self.reject_ambiguous_id,
        )


def parse_directory_config(text: str) -> DirectoryConfig:
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse YAML: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError("Settings file must contain a mapping of keys to values")

    try:
        schema = DirectorySettingsSchema.model_validate(raw)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"Invalid settings: {problems}") from e
    return schema.to_config()


def load_directory_config(path: str) -> DirectoryConfig:
    """Read and validate the settings file; any problem raises ConfigError."""
    filename = os.path.abspath(path)
    logger.info("Reading config from %s", filename)
    try:
        with open(filename, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise ConfigError(f"Could not open YAML file {filename}: {e}") from e

    cfg = parse_directory_config(text)
    if cfg.tls_validate and cfg.ca_file and not os.path.isfile(cfg.ca_file):
        raise ConfigError(f"ca_file {cfg.ca_file} does not exist")
    if not cfg.tls_validate:
        logger.warning(
            "tls_validate is off: the directory server certificate is NOT verified. "
            "Use only in test environments."
        )
    return cfg
