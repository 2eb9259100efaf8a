class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class InvalidQuantityError(DomainError):
    def __init__(self, message: str = 'quantity must be a positive integer') -> None:
        super().__init__(message, 400)


class InsufficientTicketsError(CustomBaseError):
    """Sale rejected because the event cannot cover the requested quantity"""

    def __init__(self, message: str = 'not enough tickets remaining') -> None:
        super().__init__(message, 409)


class DuplicateSaleError(ConflictError):
    def __init__(self, external_session_id: str) -> None:
        self.external_session_id = external_session_id
        super().__init__(f'Sale {external_session_id} has already been recorded')


class WebhookSignatureError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class StoreUnavailableError(CustomBaseError):
    """Transient store failure that outlived the retry policy"""

    def __init__(self, message: str = 'Service temporarily unavailable, please retry later') -> None:
        super().__init__(message, 503)
