"""OpenAI Chat Completions client for fuel receipt extraction."""

import openai
from openai import AsyncOpenAI

from fuelscan.errors import ApiError, InvalidResponseError, NetworkError
from fuelscan.integrations.base import (
    DEFAULT_MAX_TOKENS,
    ProviderClient,
    api_error_message,
    token_count,
)
from fuelscan.models import ParseOutcome, Provider, UsageMetrics
from fuelscan.parsing import parse_receipt_fields


class ChatGPTClient(ProviderClient):
    """
    ChatGPT-powered receipt field extractor.

    Uses a bearer-token Authorization header and deterministic sampling
    (temperature 0). The reply is read from the first choice's message.
    """

    provider = Provider.CHATGPT

    def __init__(
        self,
        model: str = "gpt-4o",
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = 0,
        **kwargs,
    ) -> None:
        super().__init__(model=model, max_tokens=max_tokens, **kwargs)
        self.temperature = temperature

    def _client(self, credential: str) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=credential,
            max_retries=0,
            timeout=self.timeout,
            http_client=self.http_client,
        )

    async def call(self, extracted_text: str, credential: str) -> ParseOutcome:
        prompt = self.render_prompt(extracted_text)

        sdk = self._client(credential)
        try:
            completion = await sdk.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except openai.APIConnectionError as e:
            raise NetworkError(str(e)) from e
        except openai.APIStatusError as e:
            raise ApiError(api_error_message(e.response)) from e
        except openai.APIResponseValidationError as e:
            raise InvalidResponseError() from e
        finally:
            if self.http_client is None:
                await sdk.close()

        choices = getattr(completion, "choices", None)
        if not isinstance(choices, list) or not choices:
            raise InvalidResponseError()
        message = getattr(choices[0], "message", None)
        text = getattr(message, "content", None)
        if not isinstance(text, str):
            raise InvalidResponseError()

        usage = getattr(completion, "usage", None)
        metrics = UsageMetrics(
            input_tokens=token_count(getattr(usage, "prompt_tokens", None)),
            output_tokens=token_count(getattr(usage, "completion_tokens", None)),
            provider_name=self.provider.display_name,
        )

        receipt_data = parse_receipt_fields(text)
        return ParseOutcome(receipt_data=receipt_data, usage=metrics)
