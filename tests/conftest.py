"""Shared fixtures for contact linkage tests."""

import pytest

from contact_linkage.datasets import CONTACT_SCHEMA, SAMPLE_CONTACTS
from contact_linkage.models import ContactRecord


@pytest.fixture
def sample_records() -> list[ContactRecord]:
    return [CONTACT_SCHEMA.to_record(row, index) for index, row in enumerate(SAMPLE_CONTACTS)]
