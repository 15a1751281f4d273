"""Records, requests and errors of the allergy management contract."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum


class ErrorCode(IntEnum):
    """Numeric error codes reported by the allergy management contract."""

    ALLERGY_NOT_FOUND = 1
    UNAUTHORIZED = 2
    INVALID_SEVERITY = 3
    INVALID_ALLERGEN_TYPE = 4
    ALREADY_RESOLVED = 5
    INVALID_DATE = 6
    DUPLICATE_ALLERGY = 7
    ACCESS_DENIED = 8


class AllergyError(Exception):
    """Raised when an allergy management operation is rejected."""

    def __init__(self, code) -> None:
        self.code = ErrorCode(code)
        super().__init__(f"Error(Contract, #{self.code.value})")


class AllergyStatus(Enum):
    ACTIVE = "Active"
    RESOLVED = "Resolved"


@dataclass(frozen=True)
class RecordAllergyRequest:
    """Parameters for recording a new allergy."""

    allergen: str
    allergen_type: str  # "med", "food" or "env"
    reaction_type: tuple[str, ...] | list[str]
    severity: str  # "mild", "moderate", "severe" or "critical"
    onset_date: int | None
    verified: bool


@dataclass(frozen=True)
class SeverityUpdate:
    """One entry of an allergy's severity history."""

    previous_severity: str
    new_severity: str
    updated_by: str
    updated_at: int
    reason: str


@dataclass
class AllergyRecord:
    """A complete allergy record as kept by the contract."""

    allergy_id: int
    patient_id: str
    provider_id: str
    allergen: str
    allergen_type: str
    reaction_type: list[str]
    severity: str
    onset_date: int | None
    recorded_date: int
    verified: bool
    status: AllergyStatus = AllergyStatus.ACTIVE
    resolution_date: int | None = None
    resolution_reason: str | None = None
    severity_history: list[SeverityUpdate] = field(default_factory=list)


@dataclass(frozen=True)
class AllergyInteraction:
    """A drug-allergy interaction: ``interaction_type`` is "direct" or "cross"."""

    allergy_id: int
    allergen: str
    severity: str
    reaction_type: tuple[str, ...]
    interaction_type: str