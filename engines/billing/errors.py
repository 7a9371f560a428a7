"""
Retail Ledger Billing Engine - Errors
======================================
Error taxonomy surfaced by the ledger engine.

ValidationError  -> malformed request, nothing mutated
NotFoundError    -> referenced bill/customer/product/tenant is absent
ConflictError    -> a write collided with an existing unique record
"""


class LedgerError(Exception):
    """Base error for ledger operations."""

    code = "LEDGER_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(LedgerError, ValueError):
    """Request failed validation. No state was mutated."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.field is not None:
            data["field"] = self.field
        return data


class NotFoundError(LedgerError):
    """A referenced record does not exist for this tenant."""

    code = "NOT_FOUND"

    def __init__(self, resource: str, identifier, message: str | None = None):
        self.resource = resource
        self.identifier = str(identifier)
        super().__init__(message or f"{resource} not found: {identifier}")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["resource"] = self.resource
        data["identifier"] = self.identifier
        return data


class ConflictError(LedgerError):
    """Unique ledger key collided (e.g. duplicate invoice number)."""

    code = "CONFLICT"
