"""Shared pieces of the LLM provider clients."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from fuelscan.models import ParseOutcome, Provider

PROMPT_TEMPLATE = "fuel_receipt.jinja2"
DEFAULT_MAX_TOKENS = 256


def api_error_message(response: httpx.Response) -> str:
    """
    Pull the provider's error message out of a non-2xx response.

    Both providers report failures as {"error": {"message": ...}}. When the
    body has no such message the status code is used instead.
    """
    try:
        body: Any = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]

    return f"HTTP {response.status_code}"


def token_count(value: object) -> int:
    """Usage counters that are absent or not integers count as zero."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


class ProviderClient(ABC):
    """
    Base class for a client that turns receipt text into ParseOutcome.

    Subclasses issue one request per call with the credential they are
    handed, then pass the generated text to the receipt field parser.
    """

    provider: Provider

    def __init__(
        self,
        model: str,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
        prompts_dir: str | None = None,
    ) -> None:
        """
        Initialize the provider client.

        Args:
            model: Model identifier sent with every request
            max_tokens: Cap on generated tokens (default: 256)
            timeout: Request timeout in seconds (default: 60)
            http_client: Optional httpx client handed to the provider SDK
            prompts_dir: Directory containing Jinja2 templates
                (default: the package's prompts/ directory)
        """
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.http_client = http_client

        if prompts_dir is None:
            prompts_dir = str(Path(__file__).parent.parent / "prompts")

        self.jinja_env = Environment(
            loader=FileSystemLoader(prompts_dir),
            autoescape=select_autoescape(),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render_prompt(self, extracted_text: str) -> str:
        """Render the extraction prompt with the OCR text embedded verbatim."""
        template = self.jinja_env.get_template(PROMPT_TEMPLATE)
        return template.render(OCR_TEXT=extracted_text)

    @abstractmethod
    async def call(self, extracted_text: str, credential: str) -> ParseOutcome:
        """
        Ask the provider to extract receipt fields from OCR text.

        Raises:
            NetworkError: On transport failure or timeout
            ApiError: On a non-2xx response
            InvalidResponseError: If a 2xx body lacks the generated text
            ParsingError: If the generated text is not decodable
        """
