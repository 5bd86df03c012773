from collections.abc import Mapping

from bs4 import BeautifulSoup, Tag

from webtocase.backend.models import FieldKind, FieldSpec
from webtocase.files.models import Attachment
from webtocase.frontend.callbacks import HostCallbacks, OutcomeNotifier
from webtocase.submission.models import SubmissionOutcome
from webtocase.submission.pipeline import SubmissionPipeline

SKIPPED_INPUT_TYPES = frozenset({"file", "submit", "button", "reset", "image"})

KIND_BY_INPUT_TYPE: dict[str, FieldKind] = {
    "email": FieldKind.EMAIL,
    "tel": FieldKind.PHONE,
}


class HostForm:
    """Fields and current values read from a host page's own form markup."""

    def __init__(self, fields: list[FieldSpec], values: dict[str, str]) -> None:
        self.fields = fields
        self.values = values

    @classmethod
    def parse(cls, markup: str, form_selector: str = "form") -> "HostForm":
        soup = BeautifulSoup(markup, "html.parser")
        root = soup.select_one(form_selector) or soup
        fields: list[FieldSpec] = []
        values: dict[str, str] = {}
        for element in root.select("input[name], textarea[name]"):
            name = str(element.get("name") or "").strip()
            input_type = str(element.get("type") or "text").lower()
            if not name or (element.name == "input" and input_type in SKIPPED_INPUT_TYPES):
                continue
            if element.name == "input" and input_type in ("checkbox", "radio"):
                if element.has_attr("checked"):
                    values[name] = str(element.get("value") or "on")
                continue
            values[name] = cls._value_of(element)
            if name in {f.name for f in fields}:
                continue
            fields.append(
                FieldSpec(
                    name=name,
                    label=str(element.get("data-label") or ""),
                    kind=cls._kind_of(element, input_type),
                    required=element.get("data-required") == "true",
                )
            )
        return cls(fields, values)

    @staticmethod
    def _value_of(element: Tag) -> str:
        if element.name == "textarea":
            return element.get_text().strip()
        return str(element.get("value") or "").strip()

    @staticmethod
    def _kind_of(element: Tag, input_type: str) -> FieldKind:
        if element.name == "textarea":
            return FieldKind.TEXTAREA
        return KIND_BY_INPUT_TYPE.get(input_type, FieldKind.TEXT)


class FormConnector:
    """Submits a form the host page renders itself.

    The host markup decides which inputs exist and which are required; the
    form description still supplies the nonce and CAPTCHA configuration.
    """

    def __init__(
        self,
        pipeline: SubmissionPipeline,
        callbacks: HostCallbacks | None = None,
    ) -> None:
        self._pipeline = pipeline
        self._notifier = OutcomeNotifier(callbacks)
        self._attempts = 0

    async def connect(self) -> None:
        await self._pipeline.load()
        self._notifier.loaded()

    async def submit_markup(
        self,
        markup: str,
        attachment: Attachment | None = None,
        overrides: Mapping[str, str] | None = None,
    ) -> SubmissionOutcome:
        """Read values from the host markup (plus overrides) and submit them."""
        host_form = HostForm.parse(markup)
        values = dict(host_form.values)
        if overrides:
            values.update(overrides)
        self._attempts += 1
        attempt_id = self._attempts
        outcome = await self._pipeline.submit(values, attachment, fields=host_form.fields)
        self._notifier.outcome(attempt_id, outcome)
        return outcome

    def close(self) -> None:
        self._pipeline.close()
