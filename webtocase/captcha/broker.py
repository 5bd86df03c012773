import asyncio
from abc import ABC, abstractmethod

from webtocase.backend.models import CaptchaVariant
from webtocase.captcha.exceptions import CaptchaError, CaptchaIncompleteError
from webtocase.captcha.models import CaptchaHandle
from webtocase.captcha.provider import BaseCaptchaProvider
from webtocase.captcha.registry import CallbackRegistry, ERROR, SUCCESS, callback_registry
from webtocase.logging.logger import Log


class CaptchaBroker(ABC):
    """Uniform token acquisition across reCAPTCHA variants."""

    variant: CaptchaVariant | None = None

    async def prepare(self) -> None:
        """Load-time setup (script load, widget render)."""

    @abstractmethod
    async def acquire_token(self) -> str:
        """Return a verification token.

        Raises:
            CaptchaIncompleteError: if the user still has to solve a challenge.
            CaptchaError: if the provider is unavailable or failed.
        """

    def reset(self) -> None:
        """Clear the previous response so the user can retry."""

    def close(self) -> None:
        """Release callbacks held in the shared registry."""


class DisabledCaptchaBroker(CaptchaBroker):
    async def acquire_token(self) -> str:
        return ""


class _WidgetCaptchaBroker(CaptchaBroker):
    """Shared render/reset behaviour of the v2 variants."""

    invisible = False

    def __init__(self, provider: BaseCaptchaProvider, site_key: str) -> None:
        self._provider = provider
        self._site_key = site_key
        self.handle: CaptchaHandle | None = None

    async def prepare(self) -> None:
        if self.handle is not None:
            return
        try:
            await self._provider.ensure_loaded()
            widget_id = self._provider.render(self._site_key, invisible=self.invisible)
        except Exception as exc:
            raise CaptchaError(f"reCAPTCHA could not be loaded: {exc}") from exc
        self.handle = CaptchaHandle(widget_id=widget_id, variant=self.variant)  # type: ignore[arg-type]
        Log.debug(f"Rendered {self.variant} widget {widget_id}")

    def reset(self) -> None:
        if self.handle is None:
            return
        try:
            self._provider.reset(self.handle.widget_id)
        except Exception as exc:
            Log.warning(f"reCAPTCHA reset failed: {exc}")

    def _require_handle(self) -> CaptchaHandle:
        if self.handle is None:
            raise CaptchaError("reCAPTCHA not loaded")
        return self.handle


class CheckboxCaptchaBroker(_WidgetCaptchaBroker):
    variant = CaptchaVariant.CHECKBOX

    async def acquire_token(self) -> str:
        handle = self._require_handle()
        token = self._provider.get_response(handle.widget_id)
        if not token:
            raise CaptchaIncompleteError("Please complete the verification.")
        return token


class InvisibleCaptchaBroker(_WidgetCaptchaBroker):
    """Triggers the challenge and waits for the provider callback.

    Only one challenge is in flight at a time; concurrent callers share it.
    """

    variant = CaptchaVariant.INVISIBLE
    invisible = True

    def __init__(
        self,
        provider: BaseCaptchaProvider,
        site_key: str,
        timeout_seconds: float = 120,
        registry: CallbackRegistry | None = None,
    ) -> None:
        super().__init__(provider, site_key)
        self._timeout_seconds = timeout_seconds
        self._registry = registry or callback_registry
        self._pending: asyncio.Future[str] | None = None
        self._registered = False

    async def prepare(self) -> None:
        await super().prepare()
        if not self._registered:
            self._registry.register(SUCCESS, self._on_success)
            self._registry.register(ERROR, self._on_error)
            self._registered = True

    async def acquire_token(self) -> str:
        handle = self._require_handle()
        if self._pending is None or self._pending.done():
            self._pending = asyncio.get_running_loop().create_future()
            try:
                self._provider.execute(handle.widget_id)
            except Exception as exc:
                self._pending = None
                raise CaptchaError(f"reCAPTCHA challenge failed: {exc}") from exc
        pending = self._pending
        try:
            token = await asyncio.wait_for(asyncio.shield(pending), self._timeout_seconds)
        except TimeoutError as exc:
            if self._pending is pending:
                self._pending = None
            raise CaptchaError("Verification timed out. Please try again.") from exc
        if not token:
            raise CaptchaError("Verification failed. Please try again.")
        return token

    def close(self) -> None:
        if self._registered:
            self._registry.unregister(SUCCESS, self._on_success)
            self._registry.unregister(ERROR, self._on_error)
            self._registered = False

    def _on_success(self, widget_id: int, token: str) -> None:
        if not self._owns(widget_id):
            return
        if self._pending is not None and not self._pending.done():
            self._pending.set_result(token or "")

    def _on_error(self, widget_id: int, *args: object) -> None:
        if not self._owns(widget_id):
            return
        if self._pending is not None and not self._pending.done():
            detail = args[0] if args else "provider error"
            self._pending.set_exception(CaptchaError(f"Verification error: {detail}"))

    def _owns(self, widget_id: int) -> bool:
        return self.handle is not None and self.handle.widget_id == widget_id


class ScoreCaptchaBroker(CaptchaBroker):
    """Fresh token per call, scoped to a fixed action; nothing to reset."""

    variant = CaptchaVariant.SCORE

    def __init__(
        self,
        provider: BaseCaptchaProvider,
        site_key: str,
        action: str = "submit",
    ) -> None:
        self._provider = provider
        self._site_key = site_key
        self._action = action

    async def prepare(self) -> None:
        try:
            await self._provider.ensure_loaded()
        except Exception as exc:
            raise CaptchaError(f"reCAPTCHA could not be loaded: {exc}") from exc

    async def acquire_token(self) -> str:
        try:
            await self._provider.ensure_loaded()
            token = await self._provider.execute_score(self._site_key, self._action)
        except CaptchaError:
            raise
        except Exception as exc:
            raise CaptchaError(f"Verification error: {exc}") from exc
        if not token:
            raise CaptchaError("Verification failed. Please try again.")
        return token
