from webtocase.captcha.broker import (
    CaptchaBroker,
    CheckboxCaptchaBroker,
    DisabledCaptchaBroker,
    InvisibleCaptchaBroker,
    ScoreCaptchaBroker,
)
from webtocase.captcha.factory import CaptchaBrokerFactory, CaptchaProviderFactory
from webtocase.captcha.provider import BaseCaptchaProvider, StaticTokenProvider
from webtocase.captcha.registry import CallbackRegistry, callback_registry

__all__ = [
    "BaseCaptchaProvider",
    "CallbackRegistry",
    "CaptchaBroker",
    "CaptchaBrokerFactory",
    "CaptchaProviderFactory",
    "CheckboxCaptchaBroker",
    "DisabledCaptchaBroker",
    "InvisibleCaptchaBroker",
    "ScoreCaptchaBroker",
    "StaticTokenProvider",
    "callback_registry",
]
