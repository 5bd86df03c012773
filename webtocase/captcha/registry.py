"""Process-wide registry for the provider's global callbacks.

The provider knows a single global entry point per purpose. Every widget on
the page registers its handler here instead of overwriting that entry point;
the entry point stays installed while at least one handler is registered.
Widget events carry the widget id first; handlers ignore ids they do not own.
"""

from collections.abc import Callable

from webtocase.logging.logger import Log

ONLOAD = "onload"
SUCCESS = "success"
ERROR = "error"

CALLBACK_NAMES: dict[str, str] = {
    ONLOAD: "wtcCaptchaOnload",
    SUCCESS: "wtcCaptchaSuccess",
    ERROR: "wtcCaptchaError",
}

Handler = Callable[..., None]


class CallbackRegistry:
    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}

    def register(self, purpose: str, handler: Handler) -> str:
        """Add a handler and return the global callback name for the purpose."""
        if purpose not in CALLBACK_NAMES:
            raise ValueError(f"Unknown callback purpose '{purpose}'")
        handlers = self._handlers.setdefault(purpose, [])
        handlers.append(handler)
        Log.debug(f"Registered '{purpose}' callback ({len(handlers)} active)")
        return CALLBACK_NAMES[purpose]

    def unregister(self, purpose: str, handler: Handler) -> None:
        handlers = self._handlers.get(purpose)
        if not handlers or handler not in handlers:
            return
        handlers.remove(handler)
        if not handlers:
            del self._handlers[purpose]
            Log.debug(f"Uninstalled '{purpose}' callback")

    def refcount(self, purpose: str) -> int:
        return len(self._handlers.get(purpose, ()))

    def dispatch(self, purpose: str, *args: object) -> None:
        """Entry point invoked by the provider."""
        handlers = list(self._handlers.get(purpose, ()))
        if not handlers:
            Log.debug(f"No '{purpose}' callback installed, dropping provider event")
            return
        for handler in handlers:
            handler(*args)


callback_registry = CallbackRegistry()
