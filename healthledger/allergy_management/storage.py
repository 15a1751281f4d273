"""State kept by the allergy management contract."""

from __future__ import annotations

import copy

from healthledger.allergy_management.types import (
    AllergyError,
    AllergyRecord,
    AllergyStatus,
    ErrorCode,
)


class AllergyStore:
    """Allergy records, per-patient indexes, access grants and cross-sensitivities.

    Records are copied in and out, so a record handed to a caller never
    changes what is stored until it is saved again.
    """

    def __init__(self) -> None:
        self.admin: str | None = None
        self._counter = 0
        self._allergies: dict[int, AllergyRecord] = {}
        self._patient_allergies: dict[str, list[int]] = {}
        self._access: set[tuple[str, str]] = set()
        self._cross_sensitivity: set[tuple[str, str]] = set()

    def next_allergy_id(self) -> int:
        """Return the next allergy id and advance the counter."""
        current = self._counter
        self._counter += 1
        return current

    def save_allergy(self, allergy: AllergyRecord) -> None:
        self._allergies[allergy.allergy_id] = copy.deepcopy(allergy)

    def get_allergy(self, allergy_id: int) -> AllergyRecord:
        """Return a copy of the record; raise AllergyError if it does not exist."""
        try:
            return copy.deepcopy(self._allergies[allergy_id])
        except KeyError:
            raise AllergyError(ErrorCode.ALLERGY_NOT_FOUND) from None

    def add_patient_allergy(self, patient_id: str, allergy_id: int) -> None:
        self._patient_allergies.setdefault(patient_id, []).append(allergy_id)

    def get_patient_allergies(self, patient_id: str) -> list[int]:
        return list(self._patient_allergies.get(patient_id, []))

    def check_duplicate_allergy(self, patient_id: str, allergen: str, allergen_type: str) -> bool:
        """True if the patient has an active allergy to this allergen and type."""
        for allergy_id in self.get_patient_allergies(patient_id):
            allergy = self._allergies.get(allergy_id)
            if (
                allergy is not None
                and allergy.allergen == allergen
                and allergy.allergen_type == allergen_type
                and allergy.status is AllergyStatus.ACTIVE
            ):
                return True
        return False

    def grant_access(self, patient_id: str, provider_id: str) -> None:
        self._access.add((patient_id, provider_id))

    def revoke_access(self, patient_id: str, provider_id: str) -> None:
        self._access.discard((patient_id, provider_id))

    def check_access_permission(self, patient_id: str, requester: str) -> bool:
        """The patient, the admin and explicitly granted providers have access."""
        if patient_id == requester:
            return True
        if self.admin is not None and self.admin == requester:
            return True
        return (patient_id, requester) in self._access

    def add_cross_sensitivity(self, allergen1: str, allergen2: str) -> None:
        """Record a cross-sensitivity in both directions."""
        self._cross_sensitivity.add((allergen1, allergen2))
        self._cross_sensitivity.add((allergen2, allergen1))

    def has_cross_sensitivity(self, allergen1: str, allergen2: str) -> bool:
        return (allergen1, allergen2) in self._cross_sensitivity