"""Exception hierarchy for the sheet import service"""


class SheetImportError(Exception):
    pass


class ParseError(SheetImportError, ValueError):
    """A single cell could not be converted to its domain type."""


class DecodeError(SheetImportError):
    """The uploaded bytes are not a readable workbook."""


class NotFoundError(SheetImportError, LookupError):
    pass


class SessionNotFound(NotFoundError):
    def __init__(self, session_id: str):
        super().__init__("No preview found for this session. Please upload the file again.")
        self.session_id = session_id


class SheetNotFound(NotFoundError):
    def __init__(self, sheet_name: str):
        super().__init__(f"Sheet '{sheet_name}' not found in preview")
        self.sheet_name = sheet_name


class RowNotFound(NotFoundError):
    def __init__(self, sheet_name: str, row_number: int):
        super().__init__(f"Row {row_number} not found in sheet '{sheet_name}'")
        self.sheet_name = sheet_name
        self.row_number = row_number


class PersistenceError(SheetImportError):
    """Saving records to the database failed or timed out."""
