# errors.py
# Failure kinds raised by the services; server.py turns them into JSON responses.


class EffortError(Exception):
    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(EffortError):
    """Missing, out-of-range or out-of-enumeration input."""
    status_code = 400


class NotFound(EffortError):
    status_code = 404


class PersistenceError(EffortError):
    """The storage layer failed; carries the driver's message."""
    status_code = 500
