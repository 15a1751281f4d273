import pytest

from healthledger.allergy_management.storage import AllergyStore
from healthledger.allergy_management.types import AllergyError, ErrorCode
from healthledger.allergy_management.validation import (
    check_cross_sensitivity,
    check_drug_match,
    validate_allergen_type,
    validate_severity,
)


@pytest.mark.parametrize("allergen_type", ["med", "food", "env"])
def test_valid_allergen_types(allergen_type):
    assert validate_allergen_type(allergen_type) == allergen_type


@pytest.mark.parametrize("allergen_type", ["invalid", "medication", "MED", ""])
def test_invalid_allergen_types(allergen_type):
    with pytest.raises(AllergyError) as info:
        validate_allergen_type(allergen_type)
    assert info.value.code is ErrorCode.INVALID_ALLERGEN_TYPE


@pytest.mark.parametrize("severity", ["mild", "moderate", "severe", "critical"])
def test_valid_severities(severity):
    assert validate_severity(severity) == severity


@pytest.mark.parametrize("severity", ["invalid", "life", "SEVERE", ""])
def test_invalid_severities(severity):
    with pytest.raises(AllergyError) as info:
        validate_severity(severity)
    assert info.value.code is ErrorCode.INVALID_SEVERITY


def test_drug_match_is_exact():
    assert check_drug_match("Penicillin", "Penicillin")
    assert not check_drug_match("Penicillin", "penicillin")
    assert not check_drug_match("Penicillin", "Aspirin")


def test_cross_sensitivity_uses_store():
    store = AllergyStore()
    assert not check_cross_sensitivity(store, "Penicillin", "Ampicillin")
    store.add_cross_sensitivity("Ampicillin", "Penicillin")
    assert check_cross_sensitivity(store, "Penicillin", "Ampicillin")