import re
from io import BytesIO

from PIL import Image

from fuelscan.integrations.secrets import mask_secret
from fuelscan.models import Provider, ReceiptImage


def clean_cli_output(output: str) -> str:
    """
    Remove ANSI escape codes, Rich formatting characters, whitespace, and newlines
    from CLI output to make assertions robust against terminal wrapping.
    """
    # 1. Remove ANSI escape codes
    ansi_escape = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")
    output = ansi_escape.sub("", output)

    # 2. Remove:
    # \s - all whitespace (space, tab, newline, etc.)
    # │, ╭, ╮, ╰, ╯, ─ - Rich box characters
    return re.sub(r"[\s│╭╮╰╯─]", "", output)


def make_receipt_image(width: int = 40, height: int = 80) -> ReceiptImage:
    """Build a small, valid PNG receipt image in memory."""
    buffer = BytesIO()
    Image.new("RGB", (width, height), "white").save(buffer, format="PNG")
    return ReceiptImage(content=buffer.getvalue(), source="test.png")


class InMemorySecretStore:
    """Secret store test double holding keys in a dict."""

    def __init__(self, keys: dict[Provider, str] | None = None):
        self.keys = dict(keys or {})
        self.reads: list[Provider] = []

    def exists(self, provider: Provider) -> bool:
        return bool(self.keys.get(provider))

    def get(self, provider: Provider) -> str | None:
        self.reads.append(provider)
        return self.keys.get(provider) or None

    def set(self, provider: Provider, value: str) -> bool:
        if not value:
            return self.delete(provider)
        self.keys[provider] = value
        return True

    def delete(self, provider: Provider) -> bool:
        self.keys.pop(provider, None)
        return True

    def masked_display(self, provider: Provider) -> str | None:
        value = self.keys.get(provider)
        return mask_secret(value) if value else None
