"""Configuration loader wrapping the shared schema models."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

import yaml
from pydantic import ValidationError

from .schema import (
    AdditionalFeeConfig,
    ConfigurationError,
    DependentCardConfig,
    FeeManifest,
    FeeProfile,
    FeeProfileManifestEntry,
    HealthInsuranceConfig,
    PermitFeeConfig,
    ProfessionalFeeConfig,
    PropertyFeeConfig,
    TierCatalogue,
    TierConfig,
)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
MANIFEST_FILE = CONFIG_DIRECTORY / "manifest.yaml"
PROFILE_ENV = "GOLDENVISA_FEE_PROFILE"

_LOGGER = logging.getLogger(__name__)


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


@lru_cache(maxsize=1)
def load_manifest() -> FeeManifest:
    """Load and cache the configuration manifest."""

    if not MANIFEST_FILE.exists():
        raise FileNotFoundError("Configuration manifest not found")

    raw_manifest = _load_yaml(MANIFEST_FILE)

    try:
        return FeeManifest.model_validate(raw_manifest)
    except ValidationError as error:  # pragma: no cover - defensive
        raise ConfigurationError(f"Manifest validation failed: {error}") from error


def manifest_entries() -> Sequence[FeeProfileManifestEntry]:
    """Expose the configured manifest entries."""

    return load_manifest().profiles


def available_profiles() -> Sequence[str]:
    """Return the fee profile identifiers declared in the manifest."""

    return load_manifest().profile_ids


def default_profile_id() -> str:
    """Return the active default profile, honouring ``GOLDENVISA_FEE_PROFILE``."""

    manifest = load_manifest()
    override = (os.getenv(PROFILE_ENV) or "").strip()
    if override:
        if override in manifest.profile_ids:
            return override
        _LOGGER.warning("Ignoring unknown fee profile in %s: %s", PROFILE_ENV, override)
    return manifest.default_profile


@lru_cache(maxsize=1)
def load_tiers() -> TierCatalogue:
    """Load the investment tier reference data."""

    tiers_file = CONFIG_DIRECTORY / load_manifest().tiers_file
    if not tiers_file.exists():
        raise FileNotFoundError(f"Tier configuration missing: {tiers_file.name}")

    try:
        return TierCatalogue.model_validate(_load_yaml(tiers_file))
    except ValidationError as error:
        raise ConfigurationError(f"Tier configuration validation failed: {error}") from error


@lru_cache(maxsize=8)
def load_fee_profile(profile_id: str) -> FeeProfile:
    """Load the fee schedule for ``profile_id`` from disk."""

    try:
        manifest_entry = load_manifest().get_entry(profile_id)
    except KeyError as exc:
        raise FileNotFoundError(
            f"Fee profile '{profile_id}' not declared in manifest"
        ) from exc

    config_file = CONFIG_DIRECTORY / manifest_entry.resolved_filename
    if not config_file.exists():
        raise FileNotFoundError(
            f"Configuration file for profile '{profile_id}' missing: {config_file.name}"
        )

    raw_config = _load_yaml(config_file)
    raw_config.setdefault("id", profile_id)

    try:
        profile = FeeProfile.model_validate(raw_config)
    except ValidationError as error:
        raise ConfigurationError(
            f"Configuration validation failed for profile '{profile_id}': {error}"
        ) from error

    if profile.id != profile_id:
        raise ConfigurationError(
            f"Configuration profile mismatch: expected {profile_id}, found {profile.id}"
        )

    return profile


def resolve_fee_profile(profile_id: str | None = None) -> FeeProfile:
    """Return the requested profile, or the default one when ``profile_id`` is empty."""

    return load_fee_profile(profile_id or default_profile_id())


__all__ = [
    "AdditionalFeeConfig",
    "CONFIG_DIRECTORY",
    "ConfigurationError",
    "DependentCardConfig",
    "FeeManifest",
    "FeeProfile",
    "FeeProfileManifestEntry",
    "HealthInsuranceConfig",
    "MANIFEST_FILE",
    "PROFILE_ENV",
    "PermitFeeConfig",
    "ProfessionalFeeConfig",
    "PropertyFeeConfig",
    "TierCatalogue",
    "TierConfig",
    "available_profiles",
    "default_profile_id",
    "load_fee_profile",
    "load_manifest",
    "load_tiers",
    "manifest_entries",
    "resolve_fee_profile",
]
