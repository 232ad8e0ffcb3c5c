class LedgerError(Exception):
    """
    Base class for every failure a posting can report.
    Carries an HTTP-style status so views can render it verbatim.
    """

    code = "LEDGER_ERROR"
    status_code = 400

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def as_dict(self):
        payload = {"ok": False, "error": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidRequest(LedgerError):
    """Raised when a payload is malformed (missing ids, bad dates, unknown action)."""
    code = "INVALID_REQUEST"


class NotFound(LedgerError):
    """Raised when an account, client, vendor or posting record is missing
    or belongs to another company."""
    code = "NOT_FOUND"
    status_code = 404

    @classmethod
    def for_model(cls, label, pk):
        return cls(f"{label} {pk} not found", details={"id": str(pk)})


class InvalidAmount(LedgerError):
    """Raised for zero, negative or non-finite amounts."""
    code = "INVALID_AMOUNT"

    @classmethod
    def for_value(cls, field, value):
        return cls(
            f"Invalid {field}: {value}. Amount must be positive",
            details={"field": field, "value": str(value)},
        )


class InsufficientBalance(LedgerError):
    """Raised when a debit would drive an advance pool below zero."""
    code = "INSUFFICIENT_BALANCE"

    @classmethod
    def for_entity(cls, label, pk, required, available):
        return cls(
            f"Insufficient advance balance for {label} {pk}. "
            f"Required: {required}, Available: {available}",
            details={"id": str(pk), "required": str(required), "available": str(available)},
        )


class StoreFailure(LedgerError):
    """Raised when the atomic unit aborted or the database driver failed."""
    code = "STORE_FAILURE"
    status_code = 500

    @classmethod
    def during(cls, operation, original):
        return cls(
            f"Database error during {operation}",
            details={"operation": operation, "original_error": str(original)},
        )
