class APIError(Exception):
    """Error raised by controllers and rendered by the central handlers in main.py."""

    def __init__(self, message: str, status_code: int = 400, error: str = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error = error or message


class MailDeliveryError(Exception):
    """Raised when the SMTP server refuses or drops a message."""
