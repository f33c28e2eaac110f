"""Profile loading and validation for YAML-based robot profiles."""

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Iterator
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from robotctl.core.errors import ProfileLoadError, ProfileValidationError
from robotctl.core.model import AgentSpec, RobotProfile

DEFAULT_PROFILE_ID = "root_robot"

_PROFILE_SUFFIXES = (".yml", ".yaml")

_UUID_RE = re.compile(r"^[0-9a-f]{4}$|^[0-9a-f]{8}$|^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ProfileValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedProfiles:
    profiles: dict[str, RobotProfile]
    warnings: tuple[str, ...]


def _load_schema_validator() -> Any:
    schema_text = resources.files("robotctl.schemas").joinpath("profile.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _profile_dirs() -> tuple[Path, Path]:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_config / "robotctl/profiles", xdg_data / "robotctl/profiles"


def _read_profile_doc(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProfileLoadError(f"Could not read profile file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ProfileValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ProfileValidationError(f"Profile file {path} must contain a mapping at root")
    return loaded


def _normalize_uuid(value: str, *, context: str) -> str:
    normalized = value.strip().lower()
    if not _UUID_RE.match(normalized):
        raise ProfileValidationError(
            f"{context} must be a 16-bit, 32-bit, or 128-bit UUID string"
        )
    return normalized


def _optional_float(value: Any) -> float | None:
    return None if value is None else float(value)


def _build_profile(doc: dict[str, Any], source: Path | Traversable, validator: Any) -> RobotProfile:
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ProfileValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    agent_doc = doc.get("agent", {})
    agent = AgentSpec(
        command=tuple(agent_doc.get("command", AgentSpec.command)),
        read_timeout_s=float(agent_doc.get("read_timeout_s", AgentSpec.read_timeout_s)),
    )

    return RobotProfile(
        id=doc["id"],
        name=doc["name"],
        service_uuid=_normalize_uuid(doc["service_uuid"], context=f"{doc['id']}.service_uuid"),
        tx_char_uuid=_normalize_uuid(doc["tx_char_uuid"], context=f"{doc['id']}.tx_char_uuid"),
        agent=agent,
        discovery_timeout_s=_optional_float(doc.get("discovery_timeout_s")),
        resolve_timeout_s=_optional_float(doc.get("resolve_timeout_s")),
    )


def _profile_sources() -> Iterator[tuple[Path | Traversable, bool]]:
    """Yield ``(path, packaged)`` pairs, packaged profiles first."""
    packaged = resources.files("robotctl.profiles").iterdir()
    for item in sorted(packaged, key=lambda p: p.name):
        if item.name.endswith(_PROFILE_SUFFIXES):
            yield item, True
    for directory in _profile_dirs():
        if directory.is_dir():
            for path in sorted(directory.iterdir()):
                if path.name.endswith(_PROFILE_SUFFIXES):
                    yield path, False


def load_profiles() -> LoadedProfiles:
    profiles: dict[str, RobotProfile] = {}
    warnings: list[str] = []
    validator = _load_schema_validator()

    for path, packaged in _profile_sources():
        profile = _build_profile(_read_profile_doc(path), path, validator)
        if not packaged and profile.id in profiles:
            warning = f"User profile '{profile.id}' overrides packaged profile"
            LOGGER.warning(warning)
            warnings.append(warning)
        profiles[profile.id] = profile

    return LoadedProfiles(profiles=profiles, warnings=tuple(warnings))
