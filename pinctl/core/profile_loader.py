"""Device profiles: one packaged default, refined by user YAML files.

Every file in ``$XDG_CONFIG_HOME/pinctl/profiles`` is merged on top of the
packaged default before validation, so a user file only has to spell out what
differs. A file without an ``id`` (or with the default's id) replaces the
default profile; any other id adds a new profile.
"""

from __future__ import annotations

import functools
import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator

from pinctl.core.errors import ProfileLoadError, ProfileValidationError, UUIDFormatError
from pinctl.core.model import CharacteristicMap, DeviceProfile, canonical_uuid

DEFAULT_PROFILE_ID = "esp32_pins"
DEFAULT_SCAN_TIMEOUT_S = 30.0
_PROFILE_SUFFIXES = {".yaml", ".yml"}
LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedProfiles:
    profiles: dict[str, DeviceProfile]
    warnings: tuple[str, ...]


@functools.cache
def _validator() -> Draft202012Validator:
    schema = json.loads(
        resources.files("pinctl.schemas").joinpath("profile.schema.json").read_text(encoding="utf-8")
    )
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def user_profile_dir() -> Path:
    config_home = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(config_home) / "pinctl" / "profiles"


def _parse(text: str, source: str) -> dict[str, Any]:
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ProfileValidationError(f"Invalid YAML in {source}: {exc}") from exc
    if not isinstance(doc, dict):
        raise ProfileValidationError(f"{source} must contain a mapping at root")
    return doc


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _to_profile(doc: dict[str, Any], source: str) -> DeviceProfile:
    errors = sorted(_validator().iter_errors(doc), key=lambda e: list(map(str, e.path)))
    if errors:
        details = "; ".join(
            f"{'.'.join(map(str, e.path)) or '<root>'}: {e.message}" for e in errors
        )
        raise ProfileValidationError(f"Invalid profile {source}: {details}")

    chars = doc["characteristics"]
    try:
        characteristics = CharacteristicMap(
            write=canonical_uuid(chars["write"]),
            telemetry=canonical_uuid(chars["telemetry"]),
            pin_state=canonical_uuid(chars["pin_state"]),
        )
    except UUIDFormatError as exc:
        raise ProfileValidationError(f"Invalid profile {source}: {exc}") from exc

    return DeviceProfile(
        id=doc["id"],
        name=doc["name"],
        device_name=doc.get("device_name"),
        scan_timeout_s=float(doc.get("scan", {}).get("timeout_s", DEFAULT_SCAN_TIMEOUT_S)),
        characteristics=characteristics,
        write_with_response=doc.get("write_with_response", True),
    )


def load_profiles(directory: Path | None = None) -> LoadedProfiles:
    source = "packaged default profile"
    default_doc = _parse(
        resources.files("pinctl.profiles").joinpath("default.yaml").read_text(encoding="utf-8"),
        source,
    )
    default = _to_profile(default_doc, source)
    profiles = {default.id: default}
    warnings: list[str] = []

    directory = directory or user_profile_dir()
    if not directory.is_dir():
        return LoadedProfiles(profiles=profiles, warnings=())

    user_ids: set[str] = set()
    for path in sorted(p for p in directory.iterdir() if p.suffix in _PROFILE_SUFFIXES):
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ProfileLoadError(f"Could not read profile file {path}: {exc}") from exc
        profile = _to_profile(_merge(default_doc, _parse(text, str(path))), str(path))
        if profile.id in user_ids:
            raise ProfileValidationError(f"Profile id '{profile.id}' is defined twice in {directory}")
        user_ids.add(profile.id)
        if profile.id == default.id:
            warning = f"User profile {path.name} overrides packaged profile '{default.id}'"
            LOGGER.warning(warning)
            warnings.append(warning)
        profiles[profile.id] = profile

    return LoadedProfiles(profiles=profiles, warnings=tuple(warnings))
