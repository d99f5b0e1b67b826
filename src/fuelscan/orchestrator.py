"""Provider selection for receipt interpretation."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from fuelscan.errors import NoCredentialError
from fuelscan.integrations.anthropic_client import ClaudeClient
from fuelscan.integrations.base import ProviderClient
from fuelscan.integrations.openai_client import ChatGPTClient
from fuelscan.integrations.secrets import SecretStore
from fuelscan.models import ParseOutcome, Provider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderRoute:
    """A provider paired with the client that talks to it."""

    provider: Provider
    client: ProviderClient


def default_routes(
    claude_model: str | None = None, chatgpt_model: str | None = None
) -> list[ProviderRoute]:
    """Claude first, then ChatGPT."""
    claude = ClaudeClient(model=claude_model) if claude_model else ClaudeClient()
    chatgpt = ChatGPTClient(model=chatgpt_model) if chatgpt_model else ChatGPTClient()
    return [
        ProviderRoute(provider=Provider.CLAUDE, client=claude),
        ProviderRoute(provider=Provider.CHATGPT, client=chatgpt),
    ]


class ReceiptParser:
    """
    Turns OCR text into a ParseOutcome using the first configured provider.

    Routes are tried in order, but only for credential presence: the first
    provider with a stored key is called and its result or error is final.
    A configured provider that fails is never followed by another one.
    """

    def __init__(
        self, secret_store: SecretStore, routes: Sequence[ProviderRoute]
    ) -> None:
        self.secret_store = secret_store
        self.routes = list(routes)

    def has_any_credential(self) -> bool:
        """Check if any provider has an API key configured."""
        return any(self.secret_store.exists(route.provider) for route in self.routes)

    def select_route(self) -> ProviderRoute | None:
        for route in self.routes:
            if self.secret_store.exists(route.provider):
                return route
        return None

    async def parse_fuel_receipt(self, extracted_text: str) -> ParseOutcome:
        """
        Parse fuel receipt text with the preferred configured provider.

        Args:
            extracted_text: Raw OCR text from the receipt image

        Returns:
            ParseOutcome with the parsed fields and token usage

        Raises:
            NoCredentialError: If no provider has a key configured
            InterpretationError: Any failure of the chosen provider, unchanged
        """
        route = self.select_route()
        if route is None:
            raise NoCredentialError()

        credential = self.secret_store.get(route.provider)
        if credential is None:
            # Removed between the existence check and the read
            raise NoCredentialError()

        logger.debug("Interpreting receipt with %s", route.provider.display_name)
        return await route.client.call(extracted_text, credential)
