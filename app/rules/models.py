"""Value types consumed and produced by the symptom classifier."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Patient-reported symptom severity."""

    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class RiskLevel(str, Enum):
    """Ordered risk classification, LOW < MEDIUM < HIGH < CRITICAL."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]


class Urgency(str, Enum):
    """Recommended response speed, ROUTINE < URGENT < EMERGENCY."""

    ROUTINE = "routine"
    URGENT = "urgent"
    EMERGENCY = "emergency"

    @property
    def rank(self) -> int:
        return _URGENCY_RANK[self]


_RISK_RANK = {level: i for i, level in enumerate(RiskLevel)}
_URGENCY_RANK = {u: i for i, u in enumerate(Urgency)}


@dataclass(frozen=True)
class Symptom:
    """A single reported symptom."""

    name: str
    severity: Severity
    duration: str | None = None
    description: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Symptom":
        return cls(
            name=data["name"],
            severity=Severity(data["severity"]),
            duration=data.get("duration"),
            description=data.get("description"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "severity": self.severity.value,
            "duration": self.duration,
            "description": self.description,
        }


@dataclass(frozen=True)
class BloodPressure:
    systolic: float | None = None
    diastolic: float | None = None


@dataclass(frozen=True)
class VitalSigns:
    """Optional readings. None means not measured, never zero."""

    temperature: float | None = None  # Fahrenheit
    heart_rate: float | None = None  # bpm
    blood_pressure: BloodPressure | None = None
    respiratory_rate: float | None = None
    oxygen_saturation: float | None = None  # percent

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "VitalSigns | None":
        """Build from stored snake_case or client camelCase keys."""
        if not data:
            return None
        bp = _pick(data, "blood_pressure", "bloodPressure")
        return cls(
            temperature=data.get("temperature"),
            heart_rate=_pick(data, "heart_rate", "heartRate"),
            blood_pressure=(
                BloodPressure(systolic=bp.get("systolic"), diastolic=bp.get("diastolic"))
                if bp
                else None
            ),
            respiratory_rate=_pick(data, "respiratory_rate", "respiratoryRate"),
            oxygen_saturation=_pick(data, "oxygen_saturation", "oxygenSaturation"),
        )


def _pick(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


@dataclass(frozen=True)
class Assessment:
    """Classifier output. Collections keep first-insertion order."""

    risk_level: RiskLevel
    urgency: Urgency
    recommendations: tuple[str, ...] = ()
    possible_conditions: tuple[str, ...] = ()
    immediate_actions: tuple[str, ...] = ()
    rules_fired: tuple[str, ...] = field(default=(), compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "risk_level": self.risk_level.value,
            "urgency": self.urgency.value,
            "recommendations": list(self.recommendations),
            "possible_conditions": list(self.possible_conditions),
            "immediate_actions": list(self.immediate_actions),
        }
