from webtocase.backend.models import CaptchaVariant, FormDescription
from webtocase.captcha.broker import (
    CaptchaBroker,
    CheckboxCaptchaBroker,
    DisabledCaptchaBroker,
    InvisibleCaptchaBroker,
    ScoreCaptchaBroker,
)
from webtocase.captcha.provider import BaseCaptchaProvider, StaticTokenProvider
from webtocase.config.settings import Settings


class CaptchaProviderFactory:
    """Creates the configured provider adapter."""

    @classmethod
    def create(cls, settings: Settings) -> BaseCaptchaProvider:
        provider = settings.captcha_provider.lower()
        if provider == "static":
            return StaticTokenProvider(token=settings.captcha_token)
        raise ValueError(f"Unknown captcha provider '{provider}'. Choose from: ['static']")


class CaptchaBrokerFactory:
    """Picks the broker matching a form's CAPTCHA configuration."""

    @classmethod
    def create(
        cls,
        description: FormDescription,
        provider: BaseCaptchaProvider,
        settings: Settings,
    ) -> CaptchaBroker:
        if not description.captcha_enabled or not description.captcha_site_key:
            return DisabledCaptchaBroker()
        site_key = description.captcha_site_key
        if description.captcha_variant == CaptchaVariant.SCORE:
            return ScoreCaptchaBroker(provider, site_key, action=settings.captcha_action)
        if description.captcha_variant == CaptchaVariant.INVISIBLE:
            return InvisibleCaptchaBroker(
                provider,
                site_key,
                timeout_seconds=settings.captcha_timeout_seconds,
            )
        return CheckboxCaptchaBroker(provider, site_key)
