# vahaan/errors.py
"""Error taxonomy shared by the routers.

Routes and services raise these; the handlers registered in ``main.py`` turn
them into the ``{message, errors?}`` response envelope.
"""
from typing import List, Optional


class MarketplaceError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationError(MarketplaceError):
    status_code = 400

    def __init__(self, errors: List[str], message: str = "Validation error"):
        self.errors = list(errors)
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"message": self.message, "errors": self.errors}


class InvalidRequest(MarketplaceError):
    status_code = 400


class MalformedIdentifier(MarketplaceError):
    status_code = 400

    def __init__(self, resource: str):
        super().__init__(f"Invalid {resource} ID format")


class NotFound(MarketplaceError):
    status_code = 404

    def __init__(self, resource: str):
        super().__init__(f"{resource[:1].upper()}{resource[1:]} not found")


class Forbidden(MarketplaceError):
    status_code = 403


class StoreError(MarketplaceError):
    status_code = 500

    def __init__(self, message: str = "Database error", detail: Optional[str] = None):
        self.detail = detail
        super().__init__(message)
