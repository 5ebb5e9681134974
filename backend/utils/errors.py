# backend/utils/errors.py
"""
Typed errors raised by services and routes.

Every error carries the HTTP status and a stable code; the handlers in
main.py turn them into a {"message", "code"} JSON body so clients can show
the server's message as-is.
"""
from typing import Any, Dict, Optional


class StoreError(Exception):
    http_status = 500
    code = "STORE_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_response(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


# Malformed client input, never retried automatically
class ValidationError(StoreError):
    http_status = 400
    code = "VALIDATION_ERROR"


# Missing, invalid or expired credential
class AuthError(StoreError):
    http_status = 401
    code = "AUTH_ERROR"


class NotFoundError(StoreError):
    http_status = 404
    code = "NOT_FOUND"


# Duplicate resource
class ConflictError(StoreError):
    http_status = 409
    code = "CONFLICT"


# Transactional write failed; nothing partial was committed so retrying is safe
class PersistenceError(StoreError):
    http_status = 500
    code = "PERSISTENCE_ERROR"
