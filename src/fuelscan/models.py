"""Data models for fuel receipt extraction and scanning."""

from enum import Enum
from io import BytesIO
from pathlib import Path

from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel, ConfigDict, Field

from fuelscan.errors import InvalidImageError


class Provider(str, Enum):
    """Supported LLM providers, in order of preference."""

    CLAUDE = "claude"
    CHATGPT = "chatgpt"

    @property
    def display_name(self) -> str:
        return {"claude": "Claude", "chatgpt": "ChatGPT"}[self.value]

    @property
    def env_var(self) -> str:
        """Name of the variable the credential is stored under."""
        return {"claude": "ANTHROPIC_API_KEY", "chatgpt": "OPENAI_API_KEY"}[
            self.value
        ]

    @property
    def placeholder(self) -> str:
        return {"claude": "sk-ant-...", "chatgpt": "sk-..."}[self.value]


class ReceiptFields(BaseModel):
    """Structured fuel purchase data decoded from an LLM response.

    Field names follow the JSON keys the model is asked to produce. Missing
    keys decode to None, never to zero.
    """

    model_config = ConfigDict(
        frozen=True, strict=True, extra="ignore"
    )

    gallons: float | None = None
    price_per_gallon: float | None = Field(None, alias="pricePerGallon")
    total_cost: float | None = Field(None, alias="totalCost")
    date: str | None = None  # YYYY-MM-DD format, not validated

    @property
    def is_valid(self) -> bool:
        """At least gallons or total cost is needed to be useful."""
        return self.gallons is not None or self.total_cost is not None


class UsageMetrics(BaseModel):
    """Token accounting for a single provider call."""

    model_config = ConfigDict(frozen=True)

    input_tokens: int = Field(0, ge=0)
    output_tokens: int = Field(0, ge=0)
    provider_name: str

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class ParseOutcome(BaseModel):
    """Parsed receipt fields together with the usage of the call that made them."""

    model_config = ConfigDict(frozen=True)

    receipt_data: ReceiptFields
    usage: UsageMetrics


class PrefillData(BaseModel):
    """Numeric subset of a parsed receipt handed on for user confirmation."""

    model_config = ConfigDict(frozen=True)

    gallons: float | None = None
    price_per_gallon: float | None = None
    total_cost: float | None = None

    @classmethod
    def from_receipt(cls, fields: ReceiptFields) -> "PrefillData":
        return cls(
            gallons=fields.gallons,
            price_per_gallon=fields.price_per_gallon,
            total_cost=fields.total_cost,
        )


class ReceiptImage(BaseModel):
    """A captured or selected receipt photo.

    Attributes:
        content: Raw encoded image bytes (JPEG, PNG, ...)
        source: Where the image came from, e.g. a file path or "camera"
    """

    model_config = ConfigDict(frozen=True)

    content: bytes = Field(..., repr=False)
    source: str = "camera"

    @classmethod
    def from_path(cls, path: str | Path) -> "ReceiptImage":
        """Read an image from disk.

        Raises:
            FileNotFoundError: If the path does not point to a file.
        """
        path = Path(path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Image file not found: {path}")
        return cls(content=path.read_bytes(), source=str(path))

    def dimensions(self) -> tuple[int, int]:
        """Return (width, height) decoded from the image header.

        Raises:
            InvalidImageError: If the bytes are not a decodable image.
        """
        try:
            with Image.open(BytesIO(self.content)) as img:
                return img.size
        except (UnidentifiedImageError, OSError) as e:
            raise InvalidImageError() from e


class ScanState(str, Enum):
    """States of a single scan attempt."""

    IDLE = "idle"
    IMAGE_ACQUIRED = "image_acquired"
    EXTRACTING = "extracting"
    INTERPRETING = "interpreting"
    COMPLETE = "complete"
    FAILED = "failed"


class RecoveryAction(str, Enum):
    """What the user may do after a failed scan."""

    DISMISS = "dismiss"
    RETRY = "retry"


class ScanResult(BaseModel):
    """Outcome of one scan attempt, ready for presentation.

    Attributes:
        state: Final workflow state (complete or failed)
        prefill: Prefill values, only present on success
        error_message: User-facing failure message
        error_kind: Class name of the failure, e.g. "ApiError"
        log: Ordered diagnostic messages recorded during the scan
        actions: Recovery actions offered after a failure
    """

    model_config = ConfigDict(frozen=True)

    state: ScanState
    prefill: PrefillData | None = None
    error_message: str | None = None
    error_kind: str | None = None
    log: tuple[str, ...] = ()
    actions: tuple[RecoveryAction, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.state is ScanState.COMPLETE
