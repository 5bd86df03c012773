class CaptchaError(Exception):
    """Raised when a verification token cannot be obtained."""


class CaptchaIncompleteError(CaptchaError):
    """Raised when the user has not completed a visible challenge."""
