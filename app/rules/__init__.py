"""Deterministic symptom triage rules.

Keyword tables are loaded from a versioned YAML ruleset and evaluated by
a fixed, ordered rule chain. No AI/ML is used for risk assignment.
"""

from app.rules.engine import SymptomClassifier, assess, get_classifier
from app.rules.loader import KeywordTables, RulesetLoader, compute_ruleset_hash, load_ruleset
from app.rules.models import (
    Assessment,
    BloodPressure,
    RiskLevel,
    Severity,
    Symptom,
    Urgency,
    VitalSigns,
)

__all__ = [
    "RulesetLoader",
    "KeywordTables",
    "load_ruleset",
    "compute_ruleset_hash",
    "SymptomClassifier",
    "assess",
    "get_classifier",
    "Assessment",
    "BloodPressure",
    "RiskLevel",
    "Severity",
    "Symptom",
    "Urgency",
    "VitalSigns",
]
