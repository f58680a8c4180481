from __future__ import annotations

from contact_linkage.schema import ContactField, RecordSchema

# Column headers used by the contact export the explorer loads.
CONTACT_COLUMNS = [
    "Record-Id",
    "Salutation",
    "First Name",
    "Last Name",
    "Email",
    "Phone",
    "Party",
    "Address Line 1",
    "City",
    "Country",
]


CONTACT_SCHEMA = RecordSchema.from_mapping(
    {
        ContactField.RECORD_ID: "Record-Id",
        ContactField.SALUTATION: "Salutation",
        ContactField.FIRST_NAME: "First Name",
        ContactField.LAST_NAME: "Last Name",
        ContactField.EMAIL: "Email",
        ContactField.PHONE: "Phone",
        ContactField.PARTY: "Party",
        ContactField.ADDRESS_LINE1: "Address Line 1",
        ContactField.CITY: "City",
        ContactField.COUNTRY: "Country",
    }
)


# The Vance household: progressively sparser copies of one person, a
# relative sharing her email, and an unrelated contact sharing a party.
SAMPLE_CONTACTS: list[dict[str, str]] = [
    {
        "Record-Id": "id-001",
        "Salutation": "Ms.",
        "First Name": "Eleanor",
        "Last Name": "Vance",
        "Email": "e.vance@example.com",
        "Phone": "(650) 555-0111",
        "Address Line 1": "12 Hill Road",
        "City": "Palo Alto",
        "Country": "US",
    },
    {
        "Record-Id": "id-002",
        "First Name": "Eleanor",
        "Last Name": "Vance",
        "Email": "e.vance@example.com",
        "Phone": "(650) 555-0111",
    },
    {
        "Record-Id": "id-003",
        "Last Name": "Vance",
        "Email": "e.vance@example.com",
        "Phone": "(650) 555-0111",
    },
    {
        "Record-Id": "id-004",
        "Email": "e.vance@example.com",
    },
    {
        "Record-Id": "id-005",
        "Salutation": "Mr.",
        "First Name": "Casey",
        "Last Name": "Vance",
        "Email": "e.vance@example.com",
        "Phone": "(650) 555-0199",
        "Address Line 1": "12 Hill Road",
        "City": "Palo Alto",
        "Country": "US",
    },
    {
        "Record-Id": "id-006",
        "Salutation": "Mr.",
        "First Name": "Casey",
        "Last Name": "Vance",
        "Phone": "(650) 555-0199",
        "Party": "Party-017",
    },
    {
        "Record-Id": "id-007",
        "Salutation": "Mr.",
        "First Name": "John",
        "Last Name": "Smith",
        "Email": "john.smith@email.com",
        "Phone": "(555) 123-4567",
        "Party": "Party-001",
    },
    {
        "Record-Id": "id-008",
        "First Name": "John",
        "Last Name": "Smith",
        "Phone": "(555) 123-4567",
        "Party": "Party-001",
    },
]
