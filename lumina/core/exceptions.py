class LuminaError(Exception):
    """Base for errors that map straight onto an HTTP response."""
    http_status = 400
    message = "Bad request"

    def __init__(self, message: str = None):
        self.message = message or self.message
        super().__init__(self.message)


class InvalidIdentifier(LuminaError):
    http_status = 400
    message = "Please enter a valid email address or phone number"


class InvalidVerificationCode(LuminaError):
    # One message for wrong, expired and already-used codes
    http_status = 401
    message = "Invalid or expired verification code"


class InvalidCredentials(LuminaError):
    http_status = 401
    message = "Invalid credentials"


class UserNotFound(LuminaError):
    http_status = 404
    message = "Email or mobile number not registered"


class UserAlreadyExists(LuminaError):
    http_status = 409
    message = "An account already exists for this email or mobile number"
