"""Credential storage for provider API keys."""

import os
from pathlib import Path
from typing import Protocol

from dotenv import dotenv_values, set_key, unset_key

from fuelscan.models import Provider

MASK_CHAR = "•"


def mask_secret(value: str) -> str:
    """Mask a key for display, e.g. "sk-ant-...abc".

    Keys longer than 12 characters keep their first 7 and last 3 characters.
    Shorter keys are masked entirely.
    """
    if len(value) > 12:
        return f"{value[:7]}...{value[-3:]}"
    return MASK_CHAR * len(value)


class SecretStore(Protocol):
    """Provider-keyed credential store used by the scanning pipeline."""

    def exists(self, provider: Provider) -> bool: ...

    def get(self, provider: Provider) -> str | None: ...

    def set(self, provider: Provider, value: str) -> bool: ...

    def delete(self, provider: Provider) -> bool: ...

    def masked_display(self, provider: Provider) -> str | None: ...


class DotenvSecretStore:
    """Secret store backed by a dotenv file.

    Keys are stored under each provider's environment variable name
    (ANTHROPIC_API_KEY, OPENAI_API_KEY). Values in the file win; when
    ``include_environ`` is set, the process environment is consulted for
    providers the file does not configure.

    Attributes:
        path: Location of the dotenv file
        include_environ: Whether reads fall back to os.environ
    """

    def __init__(self, path: str | Path = ".env", include_environ: bool = True):
        self.path = Path(path)
        self.include_environ = include_environ

    def _read(self, provider: Provider) -> str | None:
        value = None
        if self.path.is_file():
            value = dotenv_values(self.path).get(provider.env_var)
        if not value and self.include_environ:
            value = os.environ.get(provider.env_var)
        return value or None

    def exists(self, provider: Provider) -> bool:
        return self._read(provider) is not None

    def get(self, provider: Provider) -> str | None:
        return self._read(provider)

    def set(self, provider: Provider, value: str) -> bool:
        """Store a key. An empty value deletes the stored key instead."""
        if not value:
            return self.delete(provider)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(exist_ok=True)
        success, _, _ = set_key(self.path, provider.env_var, value)
        return bool(success)

    def delete(self, provider: Provider) -> bool:
        """Remove a key from the file. Removing a missing key succeeds."""
        if not self.path.is_file():
            return True
        if provider.env_var not in dotenv_values(self.path):
            return True
        success, _ = unset_key(self.path, provider.env_var)
        return bool(success)

    def masked_display(self, provider: Provider) -> str | None:
        value = self._read(provider)
        if not value:
            return None
        return mask_secret(value)
