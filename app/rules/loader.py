"""YAML ruleset loader with integrity verification."""

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

# Default rulesets directory
RULESETS_DIR = Path(__file__).parent.parent.parent / "rulesets"

KEYWORD_GROUPS = ("critical", "high_risk", "moderate")


def compute_ruleset_hash(content: str) -> str:
    """Compute SHA256 hash of ruleset content.

    Recorded on each triage so an assessment can be traced back to the
    exact keyword tables that produced it.

    Args:
        content: Raw YAML content string

    Returns:
        SHA256 hex digest
    """
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def load_ruleset(
    filename: str,
    rulesets_dir: Path | None = None,
) -> tuple[dict[str, Any], str]:
    """Load a ruleset YAML file and compute its hash.

    Args:
        filename: Name of the ruleset file (e.g., "symptom-triage-v1.0.0.yaml")
        rulesets_dir: Directory containing rulesets (defaults to /rulesets)

    Returns:
        Tuple of (parsed ruleset dict, SHA256 hash)

    Raises:
        FileNotFoundError: If ruleset file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    if rulesets_dir is None:
        rulesets_dir = RULESETS_DIR

    filepath = rulesets_dir / filename

    if not filepath.exists():
        raise FileNotFoundError(f"Ruleset not found: {filepath}")

    content = filepath.read_text(encoding="utf-8")
    ruleset_hash = compute_ruleset_hash(content)
    ruleset = yaml.safe_load(content)

    return ruleset, ruleset_hash


@dataclass(frozen=True)
class VitalThresholds:
    """Vital-sign cut-offs used by the escalation rules."""

    temperature_high_f: float = 103
    temperature_fever_f: float = 100.4
    heart_rate_max_bpm: float = 120
    heart_rate_min_bpm: float = 50
    systolic_crisis_mmhg: float = 180
    diastolic_crisis_mmhg: float = 120
    oxygen_saturation_min_pct: float = 90


@dataclass(frozen=True)
class KeywordTables:
    """Immutable keyword tables built once from a ruleset file."""

    version: str
    ruleset_hash: str
    critical: tuple[str, ...]
    high_risk: tuple[str, ...]
    moderate: tuple[str, ...]
    vitals: VitalThresholds


def build_keyword_tables(ruleset: dict[str, Any], ruleset_hash: str) -> KeywordTables:
    """Turn a parsed ruleset into lower-cased, de-duplicated keyword tuples.

    Raises:
        ValueError: If a keyword group is missing or empty
    """
    keywords = ruleset.get("keywords") or {}

    groups: dict[str, tuple[str, ...]] = {}
    for group in KEYWORD_GROUPS:
        entries = keywords.get(group)
        if not entries:
            raise ValueError(f"Ruleset keyword group '{group}' is missing or empty")
        groups[group] = tuple(dict.fromkeys(str(e).strip().lower() for e in entries))

    vitals = VitalThresholds(**(ruleset.get("vitals") or {}))

    return KeywordTables(
        version=str(ruleset.get("version", "unknown")),
        ruleset_hash=ruleset_hash,
        critical=groups["critical"],
        high_risk=groups["high_risk"],
        moderate=groups["moderate"],
        vitals=vitals,
    )


class RulesetLoader:
    """Stateful ruleset loader with caching."""

    def __init__(self, rulesets_dir: Path | None = None) -> None:
        self.rulesets_dir = rulesets_dir or RULESETS_DIR
        self._cache: dict[str, KeywordTables] = {}

    def load(self, filename: str, use_cache: bool = True) -> KeywordTables:
        """Load keyword tables from a ruleset with optional caching.

        Args:
            filename: Ruleset filename
            use_cache: Whether to use cached version if available

        Returns:
            Parsed keyword tables
        """
        if use_cache and filename in self._cache:
            return self._cache[filename]

        ruleset, ruleset_hash = load_ruleset(filename, self.rulesets_dir)
        tables = build_keyword_tables(ruleset, ruleset_hash)
        self._cache[filename] = tables

        return tables

    def clear_cache(self) -> None:
        """Clear the ruleset cache."""
        self._cache.clear()

    def list_rulesets(self) -> list[str]:
        """List available ruleset files."""
        return sorted(f.name for f in self.rulesets_dir.glob("*.yaml"))
