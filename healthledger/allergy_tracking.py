"""Allergy tracking contract: typed allergy records, severity audit trail and drug checks."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum, IntEnum

from healthledger.environment import Environment

MAX_ALLERGEN_LENGTH = 100
MIN_ALLERGEN_LENGTH = 1
MAX_REASON_LENGTH = 500
MAX_REACTION_LENGTH = 200


class ErrorCode(IntEnum):
    """Numeric error codes reported by the allergy tracking contract."""

    ALLERGY_NOT_FOUND = 1
    UNAUTHORIZED = 2
    INVALID_SEVERITY = 3
    INVALID_ALLERGEN_TYPE = 4
    ALREADY_RESOLVED = 5
    PATIENT_NOT_FOUND = 6
    DUPLICATE_ALLERGY = 7
    INVALID_ALLERGEN = 8
    ALLERGEN_TOO_LONG = 9
    INVALID_TIMESTAMP = 10
    REASON_TOO_LONG = 11


class AllergyTrackingError(Exception):
    """Raised when an allergy tracking operation is rejected."""

    def __init__(self, code) -> None:
        self.code = ErrorCode(code)
        super().__init__(f"Error(Contract, #{self.code.value})")


class AllergenType(Enum):
    MEDICATION = "Medication"
    FOOD = "Food"
    ENVIRONMENTAL = "Environmental"
    OTHER = "Other"

    @classmethod
    def from_symbol(cls, symbol: str) -> "AllergenType":
        """Map a symbol such as "med" or "food" to an allergen type."""
        try:
            return _ALLERGEN_SYMBOLS[symbol]
        except KeyError:
            raise AllergyTrackingError(ErrorCode.INVALID_ALLERGEN_TYPE) from None


class Severity(IntEnum):
    """Severity of a reaction, ordered from mildest to most dangerous."""

    MILD = 1
    MODERATE = 2
    SEVERE = 3
    LIFE_THREATENING = 4

    @classmethod
    def from_symbol(cls, symbol: str) -> "Severity":
        """Map a symbol such as "mild" or "life_threatening" to a severity."""
        try:
            return _SEVERITY_SYMBOLS[symbol]
        except KeyError:
            raise AllergyTrackingError(ErrorCode.INVALID_SEVERITY) from None


_ALLERGEN_SYMBOLS = {
    "med": AllergenType.MEDICATION,
    "medication": AllergenType.MEDICATION,
    "food": AllergenType.FOOD,
    "env": AllergenType.ENVIRONMENTAL,
    "environmental": AllergenType.ENVIRONMENTAL,
    "other": AllergenType.OTHER,
}

_SEVERITY_SYMBOLS = {
    "mild": Severity.MILD,
    "moderate": Severity.MODERATE,
    "severe": Severity.SEVERE,
    "life": Severity.LIFE_THREATENING,
    "life_threatening": Severity.LIFE_THREATENING,
}


class AllergyStatus(Enum):
    ACTIVE = "Active"
    RESOLVED = "Resolved"
    SUSPECTED = "Suspected"


@dataclass(frozen=True)
class AllergyRecord:
    allergy_id: int
    patient_id: str
    provider_id: str
    allergen: str
    allergen_type: AllergenType
    reaction_types: tuple[str, ...]
    severity: Severity
    onset_date: int | None
    verified: bool
    status: AllergyStatus
    recorded_date: int
    last_updated: int
    resolution_date: int | None = None
    resolution_reason: str | None = None


@dataclass(frozen=True)
class SeverityUpdate:
    """Audit entry for one change of an allergy's severity."""

    allergy_id: int
    provider_id: str
    old_severity: Severity
    new_severity: Severity
    reason: str
    timestamp: int


@dataclass(frozen=True)
class InteractionWarning:
    allergy_id: int
    allergen: str
    severity: Severity
    reaction_types: tuple[str, ...]


def _byte_length(text: str) -> int:
    return len(text.encode("utf-8"))


class AllergyTracking:
    """Records patients' allergies and warns about drug interactions."""

    def __init__(self, env: Environment) -> None:
        self.env = env
        self._counter = 0
        self._allergies: dict[int, AllergyRecord] = {}
        self._patient_allergies: dict[str, list[int]] = {}
        self._severity_history: dict[int, list[SeverityUpdate]] = {}
        self._cross_sensitivity: dict[str, list[str]] = {}

    def record_allergy(
        self,
        patient_id: str,
        provider_id: str,
        allergen: str,
        allergen_type: str,
        reaction_types,
        severity: str,
        onset_date: int | None,
        verified: bool,
    ) -> int:
        """Record an allergy; unverified ones are kept as suspected. Returns its id."""
        self.env.require_auth(provider_id)
        reactions = tuple(reaction_types)
        self._validate_allergen(allergen)
        if any(_byte_length(r) > MAX_REACTION_LENGTH for r in reactions):
            raise AllergyTrackingError(ErrorCode.ALLERGEN_TOO_LONG)
        if onset_date is not None and (onset_date == 0 or onset_date > self.env.timestamp):
            raise AllergyTrackingError(ErrorCode.INVALID_TIMESTAMP)

        allergen_type_enum = AllergenType.from_symbol(allergen_type)
        severity_enum = Severity.from_symbol(severity)

        for existing in self._records_of(patient_id):
            if existing.allergen == allergen and existing.status is not AllergyStatus.RESOLVED:
                raise AllergyTrackingError(ErrorCode.DUPLICATE_ALLERGY)

        allergy_id = self._counter
        now = self.env.timestamp
        self._allergies[allergy_id] = AllergyRecord(
            allergy_id=allergy_id,
            patient_id=patient_id,
            provider_id=provider_id,
            allergen=allergen,
            allergen_type=allergen_type_enum,
            reaction_types=reactions,
            severity=severity_enum,
            onset_date=onset_date,
            verified=verified,
            status=AllergyStatus.ACTIVE if verified else AllergyStatus.SUSPECTED,
            recorded_date=now,
            last_updated=now,
        )
        self._patient_allergies.setdefault(patient_id, []).append(allergy_id)
        self._counter = allergy_id + 1
        self.env.publish(("allergy", patient_id, allergy_id), allergen)
        return allergy_id

    def update_allergy_severity(
        self, allergy_id: int, provider_id: str, new_severity: str, reason: str
    ) -> None:
        """Change an unresolved allergy's severity and add it to the history."""
        self.env.require_auth(provider_id)
        self._validate_reason(reason)
        allergy = self.get_allergy(allergy_id)
        if allergy.status is AllergyStatus.RESOLVED:
            raise AllergyTrackingError(ErrorCode.ALREADY_RESOLVED)

        new_severity_enum = Severity.from_symbol(new_severity)
        old_severity = allergy.severity
        now = self.env.timestamp
        self._severity_history.setdefault(allergy_id, []).append(
            SeverityUpdate(
                allergy_id=allergy_id,
                provider_id=provider_id,
                old_severity=old_severity,
                new_severity=new_severity_enum,
                reason=reason,
                timestamp=now,
            )
        )
        self._allergies[allergy_id] = dataclasses.replace(
            allergy, severity=new_severity_enum, last_updated=now
        )
        self.env.publish(("sev_upd", allergy_id), (old_severity, new_severity))

    def resolve_allergy(
        self, allergy_id: int, provider_id: str, resolution_date: int, resolution_reason: str
    ) -> None:
        """Mark an allergy resolved at a past, non-zero date."""
        self.env.require_auth(provider_id)
        self._validate_reason(resolution_reason)
        if resolution_date == 0 or resolution_date > self.env.timestamp:
            raise AllergyTrackingError(ErrorCode.INVALID_TIMESTAMP)

        allergy = self.get_allergy(allergy_id)
        if allergy.status is AllergyStatus.RESOLVED:
            raise AllergyTrackingError(ErrorCode.ALREADY_RESOLVED)

        self._allergies[allergy_id] = dataclasses.replace(
            allergy,
            status=AllergyStatus.RESOLVED,
            resolution_date=resolution_date,
            resolution_reason=resolution_reason,
            last_updated=self.env.timestamp,
        )
        self.env.publish(("resolved", allergy_id), resolution_reason)

    def check_drug_allergy_interaction(self, patient_id: str, drug_name: str) -> list[InteractionWarning]:
        """Warn about active medication allergies matching or cross-sensitive to the drug."""
        warnings = []
        for allergy in self._records_of(patient_id):
            if allergy.status is not AllergyStatus.ACTIVE:
                continue
            if allergy.allergen_type is not AllergenType.MEDICATION:
                continue
            if allergy.allergen == drug_name or drug_name in self._cross_sensitivity.get(
                allergy.allergen, ()
            ):
                warnings.append(
                    InteractionWarning(
                        allergy_id=allergy.allergy_id,
                        allergen=allergy.allergen,
                        severity=allergy.severity,
                        reaction_types=allergy.reaction_types,
                    )
                )
        return warnings

    def get_active_allergies(self, patient_id: str, requester: str) -> list[AllergyRecord]:
        self.env.require_auth(requester)
        return [a for a in self._records_of(patient_id) if a.status is AllergyStatus.ACTIVE]

    def get_allergy(self, allergy_id: int) -> AllergyRecord:
        try:
            return self._allergies[allergy_id]
        except KeyError:
            raise AllergyTrackingError(ErrorCode.ALLERGY_NOT_FOUND) from None

    def get_severity_history(self, allergy_id: int) -> list[SeverityUpdate]:
        return list(self._severity_history.get(allergy_id, []))

    def register_cross_sensitivity(self, admin: str, drug1: str, drug2: str) -> None:
        """Record that each drug is cross-sensitive with the other."""
        self.env.require_auth(admin)
        related1 = self._cross_sensitivity.setdefault(drug1, [])
        if drug2 not in related1:
            related1.append(drug2)
        related2 = self._cross_sensitivity.setdefault(drug2, [])
        if drug1 not in related2:
            related2.append(drug1)

    def _records_of(self, patient_id: str):
        for allergy_id in self._patient_allergies.get(patient_id, []):
            yield self._allergies[allergy_id]

    @staticmethod
    def _validate_allergen(allergen: str) -> None:
        length = _byte_length(allergen)
        if length < MIN_ALLERGEN_LENGTH:
            raise AllergyTrackingError(ErrorCode.INVALID_ALLERGEN)
        if length > MAX_ALLERGEN_LENGTH:
            raise AllergyTrackingError(ErrorCode.ALLERGEN_TOO_LONG)

    @staticmethod
    def _validate_reason(reason: str) -> None:
        if _byte_length(reason) > MAX_REASON_LENGTH:
            raise AllergyTrackingError(ErrorCode.REASON_TOO_LONG)