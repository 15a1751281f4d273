# healthledger

This package models healthcare record contracts in memory. Each contract
keeps its own state and checks who is calling. All of them publish events to
a shared `Environment`.

There are three contracts:

- `healthledger.access_control.AccessControl` registers hospitals, doctors,
  patients, insurers and admins. It grants, revokes and checks access to
  named resources, and a grant can carry an expiry time.
- `healthledger.allergy_management.contract.AllergyManagement` records
  patient allergies, keeps a history of severity changes and resolves
  allergies. It checks drugs against active medication allergies, and each
  patient decides who may read their records.
- `healthledger.allergy_tracking.AllergyTracking` is a variant of the second
  contract. It has typed allergen kinds and severities, limits on input
  length, a separate severity history, and a register of drugs that
  cross-react.

## Installation

```
pip install .
```

To run the test suite, install the `test` extra:

```
pip install ".[test]"
pytest
```

## The environment

`healthledger.environment.Environment` is a dataclass. It holds:

- `timestamp`, the current ledger time, which you may assign to directly;
- `events`, the list of published `Event`s, each with a `topics` tuple and a
  `data` payload;
- `auths`, the addresses whose authorisation has been checked.

`generate_address()` returns a new, unique address string.

When a contract calls `require_auth(address)`, the environment raises
`AuthError` unless that address is authorised. `AuthError` is a subclass of
`PermissionError`. You can authorise particular addresses with
`authorize(*addresses)`, or every address with `mock_all_auths()`.

```python
from healthledger.environment import Environment

env = Environment(timestamp=10_000)
env.mock_all_auths()
admin = env.generate_address()
patient = env.generate_address()
provider = env.generate_address()
```

## Access control

```python
from healthledger.access_control import AccessControl, EntityType

contract = AccessControl(env)
contract.initialize(admin)

hospital = env.generate_address()
doctor = env.generate_address()
contract.register_entity(hospital, EntityType.HOSPITAL, "City Hospital", "General Hospital")
contract.register_entity(doctor, EntityType.DOCTOR, "Dr. Smith", "metadata")

contract.grant_access(hospital, doctor, "patient-123-records", 0)  # 0 = never expires
assert contract.check_access(doctor, "patient-123-records")
assert contract.get_authorized_parties("patient-123-records") == [doctor]

contract.revoke_access(hospital, doctor, "patient-123-records")
assert not contract.check_access(doctor, "patient-123-records")
```

A permission whose `expires_at` is not zero counts as valid only while
`expires_at` is later than `env.timestamp`. Two people may revoke a
permission: the entity that granted it, or the admin. The admin can also mark
an entity inactive with `deactivate_entity`. The entity's metadata can be
replaced with `update_entity`.

`AccessControlError` is raised when a call is refused. This happens, for
example, on a second `initialize`, on a duplicate registration, on a grant to
an unregistered entity, or on a revocation by someone not allowed to revoke.

## Allergy management

```python
from healthledger.allergy_management.contract import AllergyManagement
from healthledger.allergy_management.types import RecordAllergyRequest

allergies = AllergyManagement(env)
allergies.initialize(admin)
allergies.grant_access(patient, provider)

request = RecordAllergyRequest(
    allergen="Penicillin",
    allergen_type="med",          # "med", "food" or "env"
    reaction_type=["rash", "hives"],
    severity="moderate",          # "mild", "moderate", "severe" or "critical"
    onset_date=1000,
    verified=True,
)
allergy_id = allergies.record_allergy(patient, provider, request)
allergies.update_allergy_severity(allergy_id, provider, "severe", "Worse reaction")

interactions = allergies.check_drug_allergy_interaction(patient, "Penicillin")
assert interactions[0].interaction_type == "direct"
```

Three kinds of requester may read a patient's records with `get_allergy`,
`get_active_allergies` or `get_all_allergies`: the patient, the admin, and
any provider the patient has granted access. `revoke_access` withdraws a
grant. `resolve_allergy` marks an allergy resolved. Its date may not be later
than `env.timestamp`.

Refused operations raise `AllergyError`. Its `code` attribute holds an
`ErrorCode` from `healthledger.allergy_management.types`, for example
`ErrorCode.DUPLICATE_ALLERGY` or `ErrorCode.ACCESS_DENIED`. A second call to
`initialize` raises `RuntimeError`.

`healthledger.allergy_management.validation` holds the input checks:
`validate_allergen_type`, `validate_severity`, `check_drug_match` and
`check_cross_sensitivity`. `healthledger.allergy_management.storage.AllergyStore`
holds the contract's state. `AllergyStore.add_cross_sensitivity` records a
cross-sensitivity, and from then on a matching drug produces a `"cross"`
interaction.

## Allergy tracking

```python
from healthledger.allergy_tracking import AllergyTracking, Severity

tracking = AllergyTracking(env)
tracking.register_cross_sensitivity(admin, "Penicillin", "Amoxicillin")

allergy_id = tracking.record_allergy(
    patient, provider, "Penicillin", "medication", ["rash"], "moderate", None, True
)
warnings = tracking.check_drug_allergy_interaction(patient, "Amoxicillin")
assert warnings[0].allergen == "Penicillin"

tracking.update_allergy_severity(allergy_id, provider, "life_threatening", "Anaphylaxis")
assert tracking.get_allergy(allergy_id).severity is Severity.LIFE_THREATENING
history = tracking.get_severity_history(allergy_id)
```

The `allergen_type` argument accepts these symbols:

- `"med"` or `"medication"`
- `"food"`
- `"env"` or `"environmental"`
- `"other"`

The `severity` argument accepts `"mild"`, `"moderate"`, `"severe"`, and
`"life"` or `"life_threatening"`.

An unverified allergy is stored as `AllergyStatus.SUSPECTED`. Suspected
allergies are left out of the active lists and of interaction checks.

The contract enforces these limits, all measured in UTF-8 bytes:

- allergen names must be 1 to 100 bytes;
- each reaction must be at most 200 bytes;
- reasons must be at most 500 bytes.

Onset and resolution dates may not be zero. They also may not be later than
`env.timestamp`.

Refused operations raise `AllergyTrackingError`. Its `code` attribute is an
`ErrorCode` from `healthledger.allergy_tracking`. The numeric values are
fixed, for example:

- 1 for an unknown allergy;
- 7 for a duplicate allergy;
- 10 for an invalid timestamp.

## What the package does not do

All state lives in memory on the contract objects. Nothing is written to disk
or to a database, so the state is lost when the objects go away. The package
is a library only. It has no command-line tool, no network server and no user
interface.