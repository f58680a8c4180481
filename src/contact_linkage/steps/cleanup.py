from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from contact_linkage.models import ContactRecord
from contact_linkage.schema import ContactField

LOGGER = logging.getLogger(__name__)


class FunctionalCleaner:
    """Applies per-field transforms before exact comparison.

    Values that are absent stay absent; a transform that returns an empty
    string or raises makes the field absent.
    """

    def __init__(self, transforms: dict[ContactField | str, Callable[[str], str]] | None = None) -> None:
        self._transforms = {str(field): transform for field, transform in (transforms or {}).items()}

    def clean(self, records: Sequence[ContactRecord]) -> list[ContactRecord]:
        if not self._transforms:
            return list(records)

        cleaned: list[ContactRecord] = []
        for record in records:
            attrs = dict(record.attributes)
            for field_name, transform in self._transforms.items():
                value = attrs.get(field_name)
                if value is None or value == "":
                    continue
                try:
                    attrs[field_name] = transform(str(value))
                except Exception:
                    LOGGER.warning(
                        "Dropping field %s of record %s after cleaning error",
                        field_name,
                        record.record_id,
                        exc_info=True,
                    )
                    attrs.pop(field_name, None)
            cleaned.append(ContactRecord(record_id=record.record_id, attributes=attrs))
        return cleaned


def standard_cleaner() -> FunctionalCleaner:
    """Whitespace and case normalisation for the fields that tolerate it."""

    return FunctionalCleaner(
        transforms={
            ContactField.EMAIL: lambda value: value.strip().lower(),
            ContactField.PHONE: lambda value: "".join(ch for ch in value if ch.isdigit() or ch == "+"),
            ContactField.SALUTATION: lambda value: value.strip().rstrip(".").lower(),
            ContactField.ADDRESS_LINE1: lambda value: " ".join(value.lower().split()),
            ContactField.CITY: lambda value: " ".join(value.lower().split()),
            ContactField.COUNTRY: lambda value: value.strip().upper(),
        }
    )
