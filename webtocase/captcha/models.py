from dataclasses import dataclass

from webtocase.backend.models import CaptchaVariant


@dataclass(frozen=True)
class CaptchaHandle:
    """Reference to a rendered provider widget."""

    widget_id: int
    variant: CaptchaVariant
