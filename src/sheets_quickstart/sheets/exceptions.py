"""Google Sheets API exceptions."""


class SheetsAPIError(Exception):
    """Raised when a Sheets API request fails.

    The cause is not classified: expired auth, quota and missing
    spreadsheets all surface as this error.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
