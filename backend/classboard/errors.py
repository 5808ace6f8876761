"""
Domain errors raised by the classroom services.

Every error carries the HTTP status it maps to and a message that is safe
to show to the user. main.py installs a single handler that turns them
into JSON responses; none of them is fatal to the process.
"""

from typing import Optional


class ClassroomError(Exception):
    """Base class for all user-displayable classroom errors."""
    status_code = 400
    default_message = "Request could not be processed."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(ClassroomError):
    """Malformed or too-short input; recoverable by correcting it."""
    status_code = 400
    default_message = "Invalid input."


class Unauthenticated(ClassroomError):
    """No teacher token was supplied."""
    status_code = 401
    default_message = "Authentication token missing."


class Forbidden(ClassroomError):
    """Token does not match the active session, or an access code is unknown."""
    status_code = 403
    default_message = "Invalid or expired token. Please log in again."


class BadCredentials(ClassroomError):
    status_code = 403
    default_message = "Incorrect password."


class BadSecretAnswer(ClassroomError):
    status_code = 403
    default_message = "The secret answer is incorrect."


class NotFound(ClassroomError):
    status_code = 404
    default_message = "Not found."


class Conflict(ClassroomError):
    """Derived classroom id already taken."""
    status_code = 409
    default_message = "This classroom name is already taken. Please choose another one."


class CapacityExceeded(ClassroomError):
    """Every access code of a classroom is in use."""
    status_code = 409
    default_message = "No free access code left in this classroom."
