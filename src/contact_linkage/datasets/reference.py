from __future__ import annotations

import random

from contact_linkage.models import ContactRecord
from contact_linkage.schema import ContactField

_SALUTATIONS = ["Mr.", "Ms.", "Dr.", "Mx."]
_FIRST_NAMES = [
    "Eleanor",
    "Casey",
    "Jordan",
    "Sofia",
    "Maya",
    "Daniel",
    "Emma",
    "Chris",
    "Olivia",
    "Noah",
]
_LAST_NAMES = [
    "Vance",
    "Smith",
    "Johnson",
    "Brown",
    "Taylor",
    "Wilson",
    "Davies",
    "Martin",
]
_STREETS = ["Hill Road", "Maple Road", "King Avenue", "River Lane", "Elm Street", "Station Road"]
_CITIES = ["Palo Alto", "London", "Dublin", "Leeds", "Boston", "Bristol"]
_COUNTRIES = ["US", "GB", "IE"]
_DOMAINS = ["gmail.com", "outlook.com", "example.com"]

# Fields a duplicate may lose; identity-bearing email/phone are kept more often.
_DROPPABLE = [
    ContactField.SALUTATION,
    ContactField.FIRST_NAME,
    ContactField.ADDRESS_LINE1,
    ContactField.CITY,
    ContactField.COUNTRY,
    ContactField.PARTY,
    ContactField.PHONE,
]


class ReferenceDatasetGenerator:
    """Generate synthetic contacts (with partial duplicates) for tests and demos."""

    def __init__(self, seed: int = 7) -> None:
        self._rng = random.Random(seed)

    def generate(self, size: int, duplicate_rate: float = 0.3) -> list[ContactRecord]:
        if size <= 0:
            return []

        unique_count = int(size * (1.0 - duplicate_rate))
        unique_count = max(1, min(unique_count, size))

        records = [
            ContactRecord(record_id=f"id-{i + 1:03d}", attributes=self._profile(i))
            for i in range(unique_count)
        ]

        while len(records) < size:
            source = self._rng.choice(records[:unique_count])
            attrs = dict(source.attributes)
            self._perturb(attrs)
            records.append(ContactRecord(record_id=f"id-{len(records) + 1:03d}", attributes=attrs))

        return records

    def _profile(self, idx: int) -> dict[str, str]:
        first_name = self._rng.choice(_FIRST_NAMES)
        last_name = self._rng.choice(_LAST_NAMES)
        profile = {
            ContactField.SALUTATION.value: self._rng.choice(_SALUTATIONS),
            ContactField.FIRST_NAME.value: first_name,
            ContactField.LAST_NAME.value: last_name,
            ContactField.EMAIL.value: f"{first_name[0]}.{last_name}{idx}@{self._rng.choice(_DOMAINS)}".lower(),
            ContactField.PHONE.value: f"(555) {100 + idx % 900:03d}-{self._rng.randrange(10000):04d}",
            ContactField.ADDRESS_LINE1.value: f"{1 + idx % 180} {self._rng.choice(_STREETS)}",
            ContactField.CITY.value: self._rng.choice(_CITIES),
            ContactField.COUNTRY.value: self._rng.choice(_COUNTRIES),
        }
        if self._rng.random() < 0.3:
            profile[ContactField.PARTY.value] = f"Party-{idx % 50:03d}"
        return profile

    def _perturb(self, attrs: dict[str, str]) -> None:
        mutation = self._rng.choice(["sparse", "sparse", "sibling", "mixed"])

        if mutation in {"sparse", "mixed"}:
            for contact_field in self._rng.sample(_DROPPABLE, k=self._rng.randint(1, 3)):
                attrs.pop(contact_field.value, None)

        if mutation in {"sibling", "mixed"}:
            # Same household contact details, different person.
            current = attrs.get(ContactField.FIRST_NAME.value)
            choices = [name for name in _FIRST_NAMES if name != current]
            attrs[ContactField.FIRST_NAME.value] = self._rng.choice(choices)
            attrs[ContactField.SALUTATION.value] = self._rng.choice(_SALUTATIONS)
