import asyncio
from abc import ABC, abstractmethod

from webtocase.captcha.registry import CallbackRegistry, SUCCESS, callback_registry


class BaseCaptchaProvider(ABC):
    """Contract for adapters around the reCAPTCHA client API.

    One provider instance is shared by reference between all forms of a
    process; ensure_loaded() guarantees a single pending load.
    """

    def __init__(self, registry: CallbackRegistry | None = None) -> None:
        self._registry = registry or callback_registry
        self._loaded = False
        self._loading: asyncio.Future[None] | None = None

    async def ensure_loaded(self) -> None:
        if self._loaded:
            return
        if self._loading is None or self._loading.done() and self._loading.exception():
            self._loading = asyncio.ensure_future(self.load())
        await asyncio.shield(self._loading)
        self._loaded = True

    @abstractmethod
    async def load(self) -> None:
        """Load the provider's client library."""

    @abstractmethod
    def render(self, site_key: str, *, invisible: bool) -> int:
        """Render a v2 widget and return its id."""

    @abstractmethod
    def get_response(self, widget_id: int) -> str:
        """Return the current response of a checkbox widget ("" if unchecked)."""

    @abstractmethod
    def execute(self, widget_id: int) -> None:
        """Trigger an invisible challenge.

        The outcome is delivered later through the registry: the success
        callback receives ``(widget_id, token)`` and the error callback
        ``(widget_id, detail)``, so each form only reacts to its own widget.
        """

    @abstractmethod
    async def execute_score(self, site_key: str, action: str) -> str:
        """Request a fresh score-based token for an action."""

    @abstractmethod
    def reset(self, widget_id: int) -> None:
        """Clear a v2 widget's response."""


class StaticTokenProvider(BaseCaptchaProvider):
    """Serves a token obtained out of band (e.g. solved in a browser).

    No network calls. An empty token behaves like an unchecked box.
    """

    def __init__(self, token: str = "", registry: CallbackRegistry | None = None) -> None:
        super().__init__(registry)
        self._token = token
        self._widgets: dict[int, str] = {}

    async def load(self) -> None:
        return None

    def render(self, site_key: str, *, invisible: bool) -> int:
        _ = site_key, invisible
        widget_id = len(self._widgets)
        self._widgets[widget_id] = self._token
        return widget_id

    def get_response(self, widget_id: int) -> str:
        return self._widgets.get(widget_id, "")

    def execute(self, widget_id: int) -> None:
        token = self._widgets.get(widget_id, "")
        loop = asyncio.get_running_loop()
        loop.call_soon(self._registry.dispatch, SUCCESS, widget_id, token)

    async def execute_score(self, site_key: str, action: str) -> str:
        _ = site_key, action
        return self._token

    def reset(self, widget_id: int) -> None:
        if widget_id in self._widgets:
            self._widgets[widget_id] = ""
