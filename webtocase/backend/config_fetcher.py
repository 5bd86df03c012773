from webtocase.backend.client import WebToCaseClient
from webtocase.backend.models import FormDescription
from webtocase.backend.parser import build_form_description
from webtocase.logging.logger import Log


class ConfigFetcher:
    """Retrieves a form's description and a fresh nonce.

    Used for the initial load and again whenever the nonce must be replaced.
    Holds no state; callers replace whatever description they kept.
    """

    def __init__(self, client: WebToCaseClient) -> None:
        self._client = client

    async def fetch(self, form_name: str) -> FormDescription:
        """Fetch and parse the description of a form.

        Raises:
            FormNotFoundError: if the form does not exist or is inactive.
            NetworkError: if the backend could not be reached.
            FormDescriptionError: if the payload is malformed.
        """
        data = await self._client.get_form(form_name)
        description = build_form_description(data, form_name)
        Log.info(
            f"Loaded form '{form_name}' ({description.form_id}): "
            f"{len(description.fields)} fields, captcha="
            f"{description.captcha_variant.value if description.captcha_enabled else 'off'}"
        )
        return description
