"""Input checks and drug matching for the allergy management contract."""

from __future__ import annotations

from healthledger.allergy_management.storage import AllergyStore
from healthledger.allergy_management.types import AllergyError, ErrorCode

VALID_ALLERGEN_TYPES = frozenset({"med", "food", "env"})
VALID_SEVERITIES = frozenset({"mild", "moderate", "severe", "critical"})


def validate_allergen_type(allergen_type: str) -> str:
    """Return the allergen type if valid, else raise AllergyError."""
    if allergen_type not in VALID_ALLERGEN_TYPES:
        raise AllergyError(ErrorCode.INVALID_ALLERGEN_TYPE)
    return allergen_type


def validate_severity(severity: str) -> str:
    """Return the severity if valid, else raise AllergyError."""
    if severity not in VALID_SEVERITIES:
        raise AllergyError(ErrorCode.INVALID_SEVERITY)
    return severity


def check_drug_match(allergen: str, drug_name: str) -> bool:
    """True if the drug is exactly the allergen."""
    return allergen == drug_name


def check_cross_sensitivity(store: AllergyStore, allergen: str, drug_name: str) -> bool:
    """True if a cross-sensitivity between the allergen and the drug is on record."""
    return store.has_cross_sensitivity(allergen, drug_name)