from unittest.mock import MagicMock

import pytest

from webtocase.captcha.registry import CALLBACK_NAMES, ERROR, SUCCESS, CallbackRegistry


class TestCallbackRegistry:
    def test_register_returns_global_name(self, registry: CallbackRegistry) -> None:
        assert registry.register(SUCCESS, MagicMock()) == CALLBACK_NAMES[SUCCESS]

    def test_unknown_purpose_rejected(self, registry: CallbackRegistry) -> None:
        with pytest.raises(ValueError, match="Unknown callback purpose"):
            registry.register("expired", MagicMock())

    def test_dispatch_reaches_every_handler(self, registry: CallbackRegistry) -> None:
        first, second = MagicMock(), MagicMock()
        registry.register(SUCCESS, first)
        registry.register(SUCCESS, second)

        registry.dispatch(SUCCESS, "tok")

        first.assert_called_once_with("tok")
        second.assert_called_once_with("tok")

    def test_entry_point_survives_until_last_handler_leaves(
        self, registry: CallbackRegistry
    ) -> None:
        first, second = MagicMock(), MagicMock()
        registry.register(SUCCESS, first)
        registry.register(SUCCESS, second)

        registry.unregister(SUCCESS, first)
        assert registry.refcount(SUCCESS) == 1
        registry.dispatch(SUCCESS, "tok")
        second.assert_called_once_with("tok")
        first.assert_not_called()

        registry.unregister(SUCCESS, second)
        assert registry.refcount(SUCCESS) == 0

    def test_dispatch_without_handlers_is_dropped(self, registry: CallbackRegistry) -> None:
        registry.dispatch(ERROR, "boom")

        assert registry.refcount(ERROR) == 0

    def test_unregister_unknown_handler_is_noop(self, registry: CallbackRegistry) -> None:
        registry.register(SUCCESS, MagicMock())

        registry.unregister(SUCCESS, MagicMock())

        assert registry.refcount(SUCCESS) == 1
