from __future__ import annotations


class DomainError(Exception):
    """Base class for domain-level failures."""


class ValidationError(DomainError):
    pass


class RunStateError(DomainError):
    pass
