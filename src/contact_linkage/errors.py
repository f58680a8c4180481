"""Exception hierarchy for contact linkage."""


class ContactLinkageError(Exception):
    """Base class for errors raised by contact linkage."""


class RuleConfigError(ContactLinkageError, ValueError):
    """Raised when a rule tree configuration is malformed."""
