"""Allergy management contract: records, severity changes, resolution and access."""

from __future__ import annotations

from collections.abc import Iterator

from healthledger.allergy_management import validation
from healthledger.allergy_management.storage import AllergyStore
from healthledger.allergy_management.types import (
    AllergyError,
    AllergyInteraction,
    AllergyRecord,
    AllergyStatus,
    ErrorCode,
    RecordAllergyRequest,
    SeverityUpdate,
)
from healthledger.environment import Environment


class AllergyManagement:
    """Keeps patients' allergies and controls who may read them."""

    def __init__(self, env: Environment) -> None:
        self.env = env
        self._store = AllergyStore()

    def initialize(self, admin: str) -> None:
        """Set the admin; may only be done once."""
        self.env.require_auth(admin)
        if self._store.admin is not None:
            raise RuntimeError("Contract already initialized")
        self._store.admin = admin

    def record_allergy(self, patient_id: str, provider_id: str, request: RecordAllergyRequest) -> int:
        """Record a new active allergy and return its id."""
        self.env.require_auth(provider_id)
        validation.validate_allergen_type(request.allergen_type)
        validation.validate_severity(request.severity)

        if self._store.check_duplicate_allergy(patient_id, request.allergen, request.allergen_type):
            raise AllergyError(ErrorCode.DUPLICATE_ALLERGY)

        allergy_id = self._store.next_allergy_id()
        allergy = AllergyRecord(
            allergy_id=allergy_id,
            patient_id=patient_id,
            provider_id=provider_id,
            allergen=request.allergen,
            allergen_type=request.allergen_type,
            reaction_type=list(request.reaction_type),
            severity=request.severity,
            onset_date=request.onset_date,
            recorded_date=self.env.timestamp,
            verified=request.verified,
        )
        self._store.save_allergy(allergy)
        self._store.add_patient_allergy(patient_id, allergy_id)
        self._emit("allergy_recorded", patient_id=patient_id, allergy_id=allergy_id)
        return allergy_id

    def update_allergy_severity(
        self, allergy_id: int, provider_id: str, new_severity: str, reason: str
    ) -> None:
        """Change an unresolved allergy's severity and log the change."""
        self.env.require_auth(provider_id)
        validation.validate_severity(new_severity)

        allergy = self._unresolved(allergy_id)
        allergy.severity_history.append(
            SeverityUpdate(
                previous_severity=allergy.severity,
                new_severity=new_severity,
                updated_by=provider_id,
                updated_at=self.env.timestamp,
                reason=reason,
            )
        )
        allergy.severity = new_severity
        self._store.save_allergy(allergy)
        self._emit("allergy_updated", allergy_id=allergy_id, new_severity=new_severity)

    def resolve_allergy(
        self, allergy_id: int, provider_id: str, resolution_date: int, resolution_reason: str
    ) -> None:
        """Mark an allergy resolved; the date may not lie in the future."""
        self.env.require_auth(provider_id)
        if resolution_date > self.env.timestamp:
            raise AllergyError(ErrorCode.INVALID_DATE)

        allergy = self._unresolved(allergy_id)
        allergy.status = AllergyStatus.RESOLVED
        allergy.resolution_date = resolution_date
        allergy.resolution_reason = resolution_reason
        self._store.save_allergy(allergy)
        self._emit("allergy_resolved", allergy_id=allergy_id, resolution_date=resolution_date)

    def check_drug_allergy_interaction(self, patient_id: str, drug_name: str) -> list[AllergyInteraction]:
        """List the patient's active medication allergies that the drug triggers."""
        interactions = []
        for allergy in self._patient_records(patient_id):
            if allergy.status is not AllergyStatus.ACTIVE or allergy.allergen_type != "med":
                continue
            direct = validation.check_drug_match(allergy.allergen, drug_name)
            if direct or validation.check_cross_sensitivity(self._store, allergy.allergen, drug_name):
                interactions.append(
                    AllergyInteraction(
                        allergy_id=allergy.allergy_id,
                        allergen=allergy.allergen,
                        severity=allergy.severity,
                        reaction_type=tuple(allergy.reaction_type),
                        interaction_type="direct" if direct else "cross",
                    )
                )
        return interactions

    def get_active_allergies(self, patient_id: str, requester: str) -> list[AllergyRecord]:
        """Return the patient's active allergies, if the requester may read them."""
        return [
            allergy
            for allergy in self.get_all_allergies(patient_id, requester)
            if allergy.status is AllergyStatus.ACTIVE
        ]

    def get_all_allergies(self, patient_id: str, requester: str) -> list[AllergyRecord]:
        """Return every allergy of the patient, if the requester may read them."""
        self._authorize_reader(patient_id, requester)
        return list(self._patient_records(patient_id))

    def grant_access(self, patient_id: str, provider_id: str) -> None:
        """Let a provider read the patient's allergies."""
        self.env.require_auth(patient_id)
        self._store.grant_access(patient_id, provider_id)
        self._emit("access_granted", patient_id=patient_id, provider_id=provider_id)

    def revoke_access(self, patient_id: str, provider_id: str) -> None:
        """Withdraw a provider's access to the patient's allergies."""
        self.env.require_auth(patient_id)
        self._store.revoke_access(patient_id, provider_id)
        self._emit("access_revoked", patient_id=patient_id, provider_id=provider_id)

    def get_allergy(self, allergy_id: int, requester: str) -> AllergyRecord:
        """Return one allergy, if the requester may read the patient's records."""
        self.env.require_auth(requester)
        allergy = self._store.get_allergy(allergy_id)
        self._check_reader(allergy.patient_id, requester)
        return allergy

    def _emit(self, name: str, **data: object) -> None:
        self.env.publish((name,), data)

    def _unresolved(self, allergy_id: int) -> AllergyRecord:
        allergy = self._store.get_allergy(allergy_id)
        if allergy.status is AllergyStatus.RESOLVED:
            raise AllergyError(ErrorCode.ALREADY_RESOLVED)
        return allergy

    def _authorize_reader(self, patient_id: str, requester: str) -> None:
        self.env.require_auth(requester)
        self._check_reader(patient_id, requester)

    def _check_reader(self, patient_id: str, requester: str) -> None:
        if not self._store.check_access_permission(patient_id, requester):
            raise AllergyError(ErrorCode.ACCESS_DENIED)

    def _patient_records(self, patient_id: str) -> Iterator[AllergyRecord]:
        for allergy_id in self._store.get_patient_allergies(patient_id):
            try:
                yield self._store.get_allergy(allergy_id)
            except AllergyError:
                continue