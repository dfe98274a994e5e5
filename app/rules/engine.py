"""Deterministic symptom classifier.

Maps reported symptoms and optional vital signs to a risk level, urgency
and advice. All decisions are:
- Deterministic (same input = same output)
- Explainable (the ids of the rules that fired are returned)
- Escalate-only (no rule ever lowers the risk level set by an earlier one)

Rules are evaluated in a fixed order and folded over an immutable draft.
A critical match stops evaluation immediately.

NO AI/ML is used for risk assignment.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Any

from app.core.config import settings
from app.rules.loader import KeywordTables, RulesetLoader
from app.rules.models import (
    Assessment,
    RiskLevel,
    Severity,
    Symptom,
    Urgency,
    VitalSigns,
)

# Advice text
CRITICAL_RECOMMENDATIONS = (
    "Seek immediate emergency medical attention",
    "Call emergency services or go to nearest ER",
)
HIGH_FEVER_RECOMMENDATION = "High fever requires medical attention within 24 hours"
FEVER_RECOMMENDATION = "Monitor fever and stay hydrated"
HEART_RATE_RECOMMENDATION = "Abnormal heart rate - seek medical attention"
BLOOD_PRESSURE_RECOMMENDATION = "Severely elevated blood pressure - seek immediate care"
OXYGEN_RECOMMENDATION = "Low oxygen levels - seek immediate medical attention"
HIGH_RISK_RECOMMENDATIONS = (
    "Your symptoms require prompt medical evaluation",
    "Schedule an appointment with a doctor today",
)
MODERATE_RECOMMENDATIONS = (
    "Schedule a medical consultation within 2-3 days",
    "Monitor symptoms for any worsening",
)
FALLBACK_RECOMMENDATIONS = (
    "Monitor your symptoms",
    "Rest and maintain good hydration",
    "Consult a doctor if symptoms worsen",
)
HIGH_RISK_ACTIONS = ("Contact your doctor today", "Monitor symptoms closely")
MEDIUM_RISK_ACTIONS = ("Schedule a doctor appointment within 2-3 days",)


@dataclass(frozen=True)
class Facts:
    """Normalized classifier input."""

    names: tuple[str, ...]  # lower-cased symptom names, in submission order
    severities: tuple[Severity, ...]
    vitals: VitalSigns | None


@dataclass(frozen=True)
class Draft:
    """Immutable accumulator threaded through the rule chain."""

    risk_level: RiskLevel = RiskLevel.LOW
    urgency: Urgency = Urgency.ROUTINE
    recommendations: tuple[str, ...] = ()
    possible_conditions: tuple[str, ...] = ()
    immediate_actions: tuple[str, ...] = ()
    rules_fired: tuple[str, ...] = ()

    def escalate(self, level: RiskLevel, urgency: Urgency | None = None) -> "Draft":
        """Raise level and urgency to at least the given values."""
        new_urgency = self.urgency
        if urgency is not None and urgency.rank > self.urgency.rank:
            new_urgency = urgency
        return replace(
            self,
            risk_level=level if level.rank > self.risk_level.rank else self.risk_level,
            urgency=new_urgency,
        )

    def add(
        self,
        recommendations: Sequence[str] = (),
        conditions: Sequence[str] = (),
        actions: Sequence[str] = (),
    ) -> "Draft":
        return replace(
            self,
            recommendations=self.recommendations + tuple(recommendations),
            possible_conditions=self.possible_conditions + tuple(conditions),
            immediate_actions=self.immediate_actions + tuple(actions),
        )

    def finish(self) -> Assessment:
        return Assessment(
            risk_level=self.risk_level,
            urgency=self.urgency,
            recommendations=_dedupe(self.recommendations),
            possible_conditions=_dedupe(self.possible_conditions),
            immediate_actions=_dedupe(self.immediate_actions),
            rules_fired=self.rules_fired,
        )


@dataclass(frozen=True)
class Rule:
    """A predicate and its effect on the draft."""

    rule_id: str
    when: Callable[[Facts, Draft], bool]
    then: Callable[[Facts, Draft], Draft]
    stops: bool = False


def _dedupe(items: tuple[str, ...]) -> tuple[str, ...]:
    """Drop repeats, keeping first-occurrence order."""
    return tuple(dict.fromkeys(items))


def _any_name_contains(facts: Facts, keywords: Sequence[str]) -> bool:
    # Direction matters: the symptom name must contain the keyword.
    return any(keyword in name for name in facts.names for keyword in keywords)


def _coerce_symptom(symptom: Symptom | dict[str, Any]) -> Symptom:
    if isinstance(symptom, Symptom):
        return symptom
    return Symptom.from_dict(symptom)


class SymptomClassifier:
    """Rule chain for symptom risk assessment.

    Evaluation order:
    1. Critical keyword or severe severity (stops evaluation)
    2. Vital-sign escalation rules, each independent
    3. High-risk keywords, only while still LOW
    4. Moderate keywords or moderate severity, only while still LOW
    5. Per-symptom hints for fever and cough
    6. Generic advice when nothing else was recommended
    7. Immediate actions for the final level
    """

    def __init__(
        self,
        tables: KeywordTables | None = None,
        emergency_number: str | None = None,
    ) -> None:
        self.tables = tables or load_default_tables()
        self.emergency_number = emergency_number or settings.emergency_number
        self.rules: tuple[Rule, ...] = (
            Rule("CRITICAL_SYMPTOM", self._is_critical, self._critical, stops=True),
            Rule("VITALS_HIGH_TEMPERATURE", self._high_temperature, self._high_fever),
            Rule("VITALS_FEVER", self._fever_temperature, self._fever),
            Rule("VITALS_HEART_RATE", self._abnormal_heart_rate, self._heart_rate),
            Rule("VITALS_BLOOD_PRESSURE", self._hypertensive, self._blood_pressure),
            Rule("VITALS_OXYGEN", self._low_oxygen, self._oxygen),
            Rule("HIGH_RISK_SYMPTOM", self._has_high_risk, self._high_risk),
            Rule("MODERATE_SYMPTOM", self._has_moderate, self._moderate),
            Rule("SYMPTOM_HINTS", self._has_hint, self._hints),
            Rule("GENERIC_ADVICE", self._nothing_recommended, self._generic_advice),
            Rule("IMMEDIATE_ACTIONS", self._needs_actions, self._immediate_actions),
        )

    @property
    def ruleset_version(self) -> str:
        return self.tables.version

    @property
    def ruleset_hash(self) -> str:
        return self.tables.ruleset_hash

    def assess(
        self,
        symptoms: Sequence[Symptom | dict[str, Any]],
        vital_signs: VitalSigns | dict[str, Any] | None = None,
    ) -> Assessment:
        """Classify symptoms and vital signs.

        Never raises for well-formed input and never performs I/O.

        Args:
            symptoms: Reported symptoms (name and severity required)
            vital_signs: Optional measured vitals

        Returns:
            Assessment value object
        """
        if isinstance(vital_signs, dict):
            vital_signs = VitalSigns.from_dict(vital_signs)

        parsed = [_coerce_symptom(s) for s in symptoms]
        facts = Facts(
            names=tuple(s.name.lower() for s in parsed),
            severities=tuple(s.severity for s in parsed),
            vitals=vital_signs,
        )

        draft = Draft()
        for rule in self.rules:
            if not rule.when(facts, draft):
                continue
            draft = rule.then(facts, draft)
            draft = replace(draft, rules_fired=draft.rules_fired + (rule.rule_id,))
            if rule.stops:
                break

        return draft.finish()

    # --- 1. Critical ---

    def _is_critical(self, facts: Facts, draft: Draft) -> bool:
        return Severity.SEVERE in facts.severities or _any_name_contains(
            facts, self.tables.critical
        )

    def _critical(self, facts: Facts, draft: Draft) -> Draft:
        return draft.escalate(RiskLevel.CRITICAL, Urgency.EMERGENCY).add(
            recommendations=CRITICAL_RECOMMENDATIONS,
            actions=(
                f"Call {self.emergency_number} or local emergency number",
                "Do not drive yourself",
            ),
        )

    # --- 2. Vital signs ---

    def _high_temperature(self, facts: Facts, draft: Draft) -> bool:
        temperature = facts.vitals.temperature if facts.vitals else None
        return temperature is not None and temperature >= self.tables.vitals.temperature_high_f

    def _high_fever(self, facts: Facts, draft: Draft) -> Draft:
        return draft.escalate(RiskLevel.HIGH, Urgency.URGENT).add(
            recommendations=(HIGH_FEVER_RECOMMENDATION,),
            conditions=("Severe infection",),
        )

    def _fever_temperature(self, facts: Facts, draft: Draft) -> bool:
        temperature = facts.vitals.temperature if facts.vitals else None
        thresholds = self.tables.vitals
        return (
            temperature is not None
            and thresholds.temperature_fever_f <= temperature < thresholds.temperature_high_f
        )

    def _fever(self, facts: Facts, draft: Draft) -> Draft:
        return draft.escalate(RiskLevel.MEDIUM).add(recommendations=(FEVER_RECOMMENDATION,))

    def _abnormal_heart_rate(self, facts: Facts, draft: Draft) -> bool:
        heart_rate = facts.vitals.heart_rate if facts.vitals else None
        # zero counts as not recorded
        if not heart_rate:
            return False
        thresholds = self.tables.vitals
        return heart_rate > thresholds.heart_rate_max_bpm or heart_rate < thresholds.heart_rate_min_bpm

    def _heart_rate(self, facts: Facts, draft: Draft) -> Draft:
        return draft.escalate(RiskLevel.HIGH, Urgency.URGENT).add(
            recommendations=(HEART_RATE_RECOMMENDATION,)
        )

    def _hypertensive(self, facts: Facts, draft: Draft) -> bool:
        bp = facts.vitals.blood_pressure if facts.vitals else None
        if bp is None:
            return False
        thresholds = self.tables.vitals
        return (bp.systolic is not None and bp.systolic >= thresholds.systolic_crisis_mmhg) or (
            bp.diastolic is not None and bp.diastolic >= thresholds.diastolic_crisis_mmhg
        )

    def _blood_pressure(self, facts: Facts, draft: Draft) -> Draft:
        return draft.escalate(RiskLevel.HIGH, Urgency.URGENT).add(
            recommendations=(BLOOD_PRESSURE_RECOMMENDATION,),
            conditions=("Hypertensive crisis",),
        )

    def _low_oxygen(self, facts: Facts, draft: Draft) -> bool:
        saturation = facts.vitals.oxygen_saturation if facts.vitals else None
        return saturation is not None and saturation < self.tables.vitals.oxygen_saturation_min_pct

    def _oxygen(self, facts: Facts, draft: Draft) -> Draft:
        return draft.escalate(RiskLevel.HIGH, Urgency.URGENT).add(
            recommendations=(OXYGEN_RECOMMENDATION,),
            conditions=("Respiratory distress",),
        )

    # --- 3./4. Keyword escalation while still LOW ---

    def _has_high_risk(self, facts: Facts, draft: Draft) -> bool:
        return draft.risk_level is RiskLevel.LOW and _any_name_contains(
            facts, self.tables.high_risk
        )

    def _high_risk(self, facts: Facts, draft: Draft) -> Draft:
        return draft.escalate(RiskLevel.HIGH, Urgency.URGENT).add(
            recommendations=HIGH_RISK_RECOMMENDATIONS
        )

    def _has_moderate(self, facts: Facts, draft: Draft) -> bool:
        if draft.risk_level is not RiskLevel.LOW:
            return False
        return Severity.MODERATE in facts.severities or _any_name_contains(
            facts, self.tables.moderate
        )

    def _moderate(self, facts: Facts, draft: Draft) -> Draft:
        return draft.escalate(RiskLevel.MEDIUM).add(recommendations=MODERATE_RECOMMENDATIONS)

    # --- 5. Per-symptom hints ---

    def _has_hint(self, facts: Facts, draft: Draft) -> bool:
        return any("fever" in name or "cough" in name for name in facts.names)

    def _hints(self, facts: Facts, draft: Draft) -> Draft:
        for name in facts.names:
            if "fever" in name:
                draft = draft.add(
                    recommendations=("Stay hydrated and rest",),
                    conditions=("Infection", "Viral illness"),
                )
            if "cough" in name:
                draft = draft.add(
                    recommendations=("Stay hydrated",),
                    conditions=("Respiratory infection",),
                )
        return draft

    # --- 6. Fallback ---

    def _nothing_recommended(self, facts: Facts, draft: Draft) -> bool:
        return not draft.recommendations

    def _generic_advice(self, facts: Facts, draft: Draft) -> Draft:
        return draft.add(recommendations=FALLBACK_RECOMMENDATIONS)

    # --- 7. Immediate actions ---

    def _needs_actions(self, facts: Facts, draft: Draft) -> bool:
        return draft.risk_level in (RiskLevel.HIGH, RiskLevel.MEDIUM)

    def _immediate_actions(self, facts: Facts, draft: Draft) -> Draft:
        if draft.risk_level is RiskLevel.HIGH:
            return draft.add(actions=HIGH_RISK_ACTIONS)
        return draft.add(actions=MEDIUM_RISK_ACTIONS)


_loader = RulesetLoader()


def load_default_tables() -> KeywordTables:
    """Keyword tables for the configured ruleset, loaded once per process."""
    return _loader.load(settings.triage_ruleset)


@lru_cache
def get_classifier() -> SymptomClassifier:
    """Shared classifier built from the configured ruleset."""
    return SymptomClassifier()


def assess(
    symptoms: Sequence[Symptom | dict[str, Any]],
    vital_signs: VitalSigns | dict[str, Any] | None = None,
) -> Assessment:
    """Convenience function to assess symptoms with the default ruleset.

    Args:
        symptoms: Reported symptoms
        vital_signs: Optional vitals

    Returns:
        Assessment
    """
    return get_classifier().assess(symptoms, vital_signs)
