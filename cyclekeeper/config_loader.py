"""Load, validate, and hot-reload the CycleKeeper tracker configuration.

The config lives in ``tracker_config.yaml`` alongside this module.  It holds
the irregularity thresholds, the two symptom vocabularies and the flow display
labels.  It is loaded once and cached; call ``reload_tracker_config()`` to
re-read from disk without a restart.

Usage::

    from cyclekeeper.config_loader import get_tracker_config

    config = get_tracker_config()
    config.irregularity.max_length_variation_days   # 7
    "cramps" in config.symptoms.during               # True
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("cyclekeeper.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "tracker_config.yaml"

_FLOW_LEVELS = ("light", "normal", "heavy")


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass
class IrregularityConfig:
    """Variation thresholds (days) above which cycles are flagged irregular."""

    max_length_variation_days: int = 7
    max_interval_variation_days: int = 10


@dataclass
class SymptomVocabulary:
    """The two fixed symptom vocabularies offered to the user.

    Attributes:
        during: Symptoms experienced during the cycle.
        before: Premenstrual symptoms experienced before the cycle.
    """

    during: list[str]
    before: list[str]


@dataclass
class TrackerConfig:
    """Complete, validated tracker configuration.

    Attributes:
        version:      Config schema version string.
        irregularity: Irregularity flag thresholds.
        symptoms:     Allowed symptom vocabularies.
        flow_labels:  Display label per flow level.
    """

    version: str
    irregularity: IrregularityConfig
    symptoms: SymptomVocabulary
    flow_labels: dict[str, str]

    def flow_label(self, flow: str) -> str:
        return self.flow_labels.get(flow, self.flow_labels.get("normal", "Normal"))


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when tracker_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Tracker config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _string_list(value: Any, section: str, errors: list[str]) -> list[str]:
    if not isinstance(value, list) or not value:
        errors.append(f"'{section}' must be a non-empty list of strings")
        return []
    items: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            errors.append(f"'{section}' contains an invalid entry: {item!r}")
            continue
        items.append(item.strip())
    return items


def _validate_and_build(raw: dict) -> TrackerConfig:
    """Validate the raw YAML dict and construct a TrackerConfig.

    Raises:
        ConfigValidationError: If any section is missing or invalid.
    """
    errors: list[str] = []

    version = str(raw.get("version", "1.0"))

    # ── Irregularity thresholds ──
    irr_raw = raw.get("irregularity", {}) or {}
    thresholds: dict[str, int] = {}
    for key, default in (
        ("max_length_variation_days", 7),
        ("max_interval_variation_days", 10),
    ):
        value = irr_raw.get(key, default)
        try:
            days = int(value)
        except (TypeError, ValueError):
            errors.append(f"irregularity.{key} must be an integer, got {value!r}")
            continue
        if days < 0:
            errors.append(f"irregularity.{key} = {days} must not be negative")
        thresholds[key] = days
    irregularity = IrregularityConfig(**thresholds)

    # ── Symptom vocabularies ──
    sym_raw = raw.get("symptoms", {}) or {}
    symptoms = SymptomVocabulary(
        during=_string_list(sym_raw.get("during"), "symptoms.during", errors),
        before=_string_list(sym_raw.get("before"), "symptoms.before", errors),
    )

    # ── Flow labels ──
    labels_raw = raw.get("flow_labels", {}) or {}
    flow_labels: dict[str, str] = {}
    for level in _FLOW_LEVELS:
        flow_labels[level] = str(labels_raw.get(level, level.capitalize()))
    unknown = set(labels_raw) - set(_FLOW_LEVELS)
    if unknown:
        errors.append(f"flow_labels has unknown levels: {sorted(unknown)}")

    if errors:
        raise ConfigValidationError(
            f"tracker_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return TrackerConfig(
        version=version,
        irregularity=irregularity,
        symptoms=symptoms,
        flow_labels=flow_labels,
    )


def load_tracker_config(path: Path | None = None) -> TrackerConfig:
    """Load and validate the tracker config from disk.

    Args:
        path: Override path to YAML. Uses the bundled tracker_config.yaml by default.
    """
    target = path or _CONFIG_PATH
    config = _validate_and_build(_load_yaml(target))
    logger.info("Loaded tracker config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: TrackerConfig | None = None
_config_lock = threading.Lock()


def get_tracker_config() -> TrackerConfig:
    """Return the global TrackerConfig singleton, loading it on first call."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_tracker_config()
    return _config


def reload_tracker_config(path: Path | None = None) -> TrackerConfig:
    """Reload the tracker config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is re-raised.
    """
    global _config
    new_config = load_tracker_config(path)
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Tracker config reloaded: v%s → v%s", old_version, new_config.version)
    return new_config
