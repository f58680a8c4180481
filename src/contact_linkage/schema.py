from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Mapping

from contact_linkage.models import ContactRecord


class ContactField(StrEnum):
    RECORD_ID = "recordId"
    SALUTATION = "salutation"
    FIRST_NAME = "firstName"
    LAST_NAME = "lastName"
    EMAIL = "email"
    PHONE = "phone"
    PARTY = "party"
    ADDRESS_LINE1 = "addressLine1"
    CITY = "city"
    COUNTRY = "country"


@dataclass(frozen=True)
class RecordSchema:
    """Maps source-system columns to the recognised contact fields."""

    column_to_field: Mapping[str, ContactField]

    @classmethod
    def from_mapping(cls, mapping: Mapping[ContactField, str]) -> "RecordSchema":
        return cls(column_to_field={column: contact_field for contact_field, column in mapping.items()})

    def column_for(self, contact_field: ContactField) -> str | None:
        for column, mapped in self.column_to_field.items():
            if mapped == contact_field:
                return column
        return None

    def value_for(self, row: Mapping[str, object], contact_field: ContactField) -> str | None:
        column = self.column_for(contact_field)
        if column is None:
            return None
        value = row.get(column)
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    def to_record(self, row: Mapping[str, object], index: int = 0) -> ContactRecord:
        """Build a record from a source row; absent values are left out."""

        record_id = self.value_for(row, ContactField.RECORD_ID) or f"record-{index}"
        attributes: dict[str, str] = {}
        for contact_field in ContactField:
            if contact_field is ContactField.RECORD_ID:
                continue
            value = self.value_for(row, contact_field)
            if value is not None:
                attributes[contact_field.value] = value
        return ContactRecord(record_id=record_id, attributes=attributes)

    def to_row(self, record: ContactRecord) -> dict[str, str]:
        row: dict[str, str] = {}
        for column, contact_field in self.column_to_field.items():
            if contact_field is ContactField.RECORD_ID:
                row[column] = record.record_id
            else:
                value = record.value(contact_field.value)
                row[column] = "" if value is None else str(value)
        return row
