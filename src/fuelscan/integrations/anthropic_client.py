"""Anthropic Messages API client for fuel receipt extraction."""

import anthropic
from anthropic import AsyncAnthropic
from anthropic.types import MessageParam

from fuelscan.errors import ApiError, InvalidResponseError, NetworkError
from fuelscan.integrations.base import (
    DEFAULT_MAX_TOKENS,
    ProviderClient,
    api_error_message,
    token_count,
)
from fuelscan.models import ParseOutcome, Provider, UsageMetrics
from fuelscan.parsing import parse_receipt_fields

ANTHROPIC_VERSION = "2023-06-01"


class ClaudeClient(ProviderClient):
    """
    Claude-powered receipt field extractor.

    Sends the rendered prompt as a single user message to the Messages API
    and reads the reply from the first content block. Requests authenticate
    with the raw key in the x-api-key header.
    """

    provider = Provider.CLAUDE

    def __init__(
        self,
        model: str = "claude-haiku-4-5",
        max_tokens: int = DEFAULT_MAX_TOKENS,
        **kwargs,
    ) -> None:
        super().__init__(model=model, max_tokens=max_tokens, **kwargs)

    def _client(self, credential: str) -> AsyncAnthropic:
        return AsyncAnthropic(
            api_key=credential,
            max_retries=0,
            timeout=self.timeout,
            default_headers={"anthropic-version": ANTHROPIC_VERSION},
            http_client=self.http_client,
        )

    async def call(self, extracted_text: str, credential: str) -> ParseOutcome:
        prompt = self.render_prompt(extracted_text)
        messages: list[MessageParam] = [{"role": "user", "content": prompt}]

        sdk = self._client(credential)
        try:
            response = await sdk.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=messages,
            )
        except anthropic.APIConnectionError as e:
            # Also covers APITimeoutError
            raise NetworkError(str(e)) from e
        except anthropic.APIStatusError as e:
            raise ApiError(api_error_message(e.response)) from e
        except anthropic.APIResponseValidationError as e:
            raise InvalidResponseError() from e
        finally:
            # An injected http_client belongs to the caller
            if self.http_client is None:
                await sdk.close()

        content = getattr(response, "content", None)
        if not isinstance(content, list) or not content:
            raise InvalidResponseError()
        text = getattr(content[0], "text", None)
        if not isinstance(text, str):
            raise InvalidResponseError()

        usage = getattr(response, "usage", None)
        metrics = UsageMetrics(
            input_tokens=token_count(getattr(usage, "input_tokens", None)),
            output_tokens=token_count(getattr(usage, "output_tokens", None)),
            provider_name=self.provider.display_name,
        )

        receipt_data = parse_receipt_fields(text)
        return ParseOutcome(receipt_data=receipt_data, usage=metrics)
