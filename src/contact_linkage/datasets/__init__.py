from contact_linkage.datasets.profiles import CONTACT_COLUMNS, CONTACT_SCHEMA, SAMPLE_CONTACTS
from contact_linkage.datasets.reference import ReferenceDatasetGenerator

__all__ = ["CONTACT_COLUMNS", "CONTACT_SCHEMA", "SAMPLE_CONTACTS", "ReferenceDatasetGenerator"]
