import logging
import sys


class Log:
    """Client-wide logger. Nonces, CAPTCHA tokens and file bytes go through mask()."""

    _logger: logging.Logger = logging.getLogger("webtocase")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Attach a stdout handler once and set the level."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] webtocase: %(message)s")
            )
            cls._logger.addHandler(handler)

    @staticmethod
    def mask(secret: str | None) -> str:
        """Render a secret as a length hint only."""
        if not secret:
            return "<empty>"
        return f"<{len(secret)} chars>"

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log an error with the active exception's traceback."""
        cls._logger.exception(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)
