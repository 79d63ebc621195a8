class LeadUploadError(Exception):
    """Base class for lead ingestion failures."""


class ParseError(LeadUploadError):
    """The uploaded file could not be read as a workbook. Aborts the upload."""


class RowValidationError(LeadUploadError):
    """A single row is missing a required field or has a malformed email."""

    def __init__(self, row_number: int, reason: str):
        self.row_number = row_number
        self.reason = reason
        super().__init__(f"Row {row_number}: {reason}")


class DuplicateError(LeadUploadError):
    """The row's lead id is already stored."""

    def __init__(self, row_number: int, lead_id: str):
        self.row_number = row_number
        self.lead_id = lead_id
        super().__init__(f"Row {row_number}: Lead ID {lead_id} already exists")


class PersistenceError(LeadUploadError):
    """A write to the store failed for a reason other than a duplicate id."""


class BatchInsertError(PersistenceError):
    """
    An ordered batch insert stopped early.

    inserted is the number of leading rows that are persisted.
    """

    def __init__(self, inserted: int, unique_violation: bool, cause: Exception):
        self.inserted = inserted
        self.unique_violation = unique_violation
        self.cause = cause
        super().__init__(str(cause))
