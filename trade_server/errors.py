"""Errors raised by the trade store."""


class TradeStoreError(Exception):
    """Base class for every error the trade store raises."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {'success': False, 'error': self.message}


class ValidationError(TradeStoreError):
    """A required field is missing or malformed."""


class NotFoundError(TradeStoreError):
    """The referenced trade or notification does not exist."""

    status_code = 404


class InvalidStateError(TradeStoreError):
    """The operation is not legal for the trade's current status."""

    def __init__(self, message: str, current_status: str):
        super().__init__(message)
        self.current_status = current_status

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload['currentStatus'] = self.current_status
        return payload
