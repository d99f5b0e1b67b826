"""Single-scan workflow: image -> OCR text -> parsed receipt -> prefill data."""

import asyncio
import logging
from collections.abc import Callable

from fuelscan.errors import NoCredentialError, NoTextFoundError, ScanError
from fuelscan.integrations.ocr import TextExtractor
from fuelscan.models import (
    PrefillData,
    ReceiptImage,
    RecoveryAction,
    ScanResult,
    ScanState,
)
from fuelscan.orchestrator import ReceiptParser

logger = logging.getLogger(__name__)

NO_CREDENTIAL_GUIDANCE = (
    "No AI API key configured. Please add your Claude or ChatGPT API key "
    "with 'fuelscan keys set'."
)

STATUS_MESSAGES = {
    ScanState.IDLE: "Waiting for a receipt photo",
    ScanState.IMAGE_ACQUIRED: "Receipt photo ready",
    ScanState.EXTRACTING: "Extracting text from image...",
    ScanState.INTERPRETING: "Analyzing receipt with AI...",
    ScanState.COMPLETE: "Done",
    ScanState.FAILED: "Scan failed",
}


class WorkflowStateError(RuntimeError):
    """Raised when a workflow operation is invoked from the wrong state."""


def _format_value(value: float | None) -> str:
    return "nil" if value is None else str(value)


class ScanWorkflow:
    """
    Coordinates one user-initiated receipt scan.

    The scan moves Idle -> ImageAcquired -> Extracting -> Interpreting ->
    Complete, or ends in Failed. Only one suspending operation is in flight
    at a time and extraction always precedes interpretation. A completed
    workflow cannot be reused; a failed one may be reset with
    discard_and_retry().

    Milestones are appended to an ordered diagnostic log and forwarded to
    ``on_progress``. The log is advisory and never changes the outcome.
    """

    def __init__(
        self,
        text_extractor: TextExtractor,
        receipt_parser: ReceiptParser,
        on_progress: Callable[[str, str], None] | None = None,
        on_complete: Callable[[PrefillData], None] | None = None,
    ) -> None:
        """
        Initialize the workflow.

        Args:
            text_extractor: OCR engine used to read the image
            receipt_parser: Orchestrator that picks a provider and parses text
            on_progress: Optional callback for progress updates (event_type, message)
            on_complete: Optional callback receiving the prefill data on success
        """
        self.text_extractor = text_extractor
        self.receipt_parser = receipt_parser
        self.on_progress = on_progress
        self.on_complete = on_complete

        self.state = ScanState.IDLE
        self.image: ReceiptImage | None = None
        self.error: ScanError | None = None
        self._log: list[str] = []

    @property
    def log(self) -> tuple[str, ...]:
        return tuple(self._log)

    @property
    def status(self) -> str:
        """Human-readable status of the current state."""
        if self.state is ScanState.FAILED and self.error is not None:
            return str(self.error)
        return STATUS_MESSAGES[self.state]

    def _emit(self, event_type: str, message: str) -> None:
        self._log.append(message)
        logger.debug("[%s] %s", event_type, message)
        if self.on_progress is None:
            return
        try:
            self.on_progress(event_type, message)
        except Exception:
            logger.exception("Progress callback failed for %s event", event_type)

    def _require(self, *states: ScanState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise WorkflowStateError(
                f"Cannot do this while {self.state.value}; expected {allowed}"
            )

    def _fail(self, error: ScanError) -> ScanResult:
        self.state = ScanState.FAILED
        self.error = error
        self._emit("scan_error", f"ERROR: {error}")
        return ScanResult(
            state=self.state,
            error_message=str(error),
            error_kind=type(error).__name__,
            log=self.log,
            actions=(RecoveryAction.DISMISS, RecoveryAction.RETRY),
        )

    def acquire_image(self, image: ReceiptImage) -> None:
        """Accept a camera capture or library selection."""
        self._require(ScanState.IDLE)
        self.image = image
        self.state = ScanState.IMAGE_ACQUIRED

    async def run(self) -> ScanResult:
        """
        Run extraction and interpretation for the acquired image.

        Returns:
            ScanResult with prefill data on success, or the failure message
            and recovery actions

        Raises:
            WorkflowStateError: If no image has been acquired
            asyncio.CancelledError: If the surrounding task is cancelled
        """
        self._require(ScanState.IMAGE_ACQUIRED)
        image = self.image
        if image is None:
            raise WorkflowStateError("No receipt image has been acquired")

        if not self.receipt_parser.has_any_credential():
            return self._fail(NoCredentialError(NO_CREDENTIAL_GUIDANCE))

        self._log.clear()
        self.error = None
        self._emit("scan_start", "Starting image processing...")

        # Step 1: OCR
        self.state = ScanState.EXTRACTING
        try:
            width, height = image.dimensions()
            self._emit("image_info", f"Image size: {width}x{height}")
            self._emit("ocr_start", "Starting OCR...")

            # OCR is synchronous, so it runs in an executor to keep the loop free
            loop = asyncio.get_running_loop()
            text = await loop.run_in_executor(
                None, self.text_extractor.extract_text, image
            )
            if not text or not text.strip():
                raise NoTextFoundError()
        except ScanError as e:
            return self._fail(e)

        self._emit("ocr_success", f"OCR completed. Text length: {len(text)} chars")
        self._emit("ocr_text", "--- OCR Text ---")
        self._emit("ocr_text", text)
        self._emit("ocr_text", "--- End OCR ---")

        # Step 2: LLM parsing
        self.state = ScanState.INTERPRETING
        self._emit("llm_start", "Sending to LLM...")
        try:
            outcome = await self.receipt_parser.parse_fuel_receipt(text)
        except ScanError as e:
            return self._fail(e)

        usage = outcome.usage
        fields = outcome.receipt_data
        self._emit("llm_success", f"LLM response received ({usage.provider_name}):")
        self._emit("llm_usage", f"  Input tokens: {usage.input_tokens}")
        self._emit("llm_usage", f"  Output tokens: {usage.output_tokens}")
        self._emit("llm_usage", f"  Total tokens: {usage.total_tokens}")
        self._emit("parsed", "Parsed data:")
        self._emit("parsed", f"  gallons: {_format_value(fields.gallons)}")
        self._emit(
            "parsed", f"  pricePerGallon: {_format_value(fields.price_per_gallon)}"
        )
        self._emit("parsed", f"  totalCost: {_format_value(fields.total_cost)}")

        # Step 3: hand the data on
        prefill = PrefillData.from_receipt(fields)
        self.state = ScanState.COMPLETE
        self._emit("scan_complete", "Processing complete. Returning data...")
        if self.on_complete:
            self.on_complete(prefill)

        return ScanResult(state=self.state, prefill=prefill, log=self.log)

    async def scan(self, image: ReceiptImage) -> ScanResult:
        """Acquire an image and run the scan in one step."""
        self.acquire_image(image)
        return await self.run()

    def dismiss(self) -> None:
        """Accept the failure. The attempt stays failed."""
        self._require(ScanState.FAILED)

    def discard_and_retry(self) -> None:
        """Drop the image and log so a new image can be acquired."""
        self._require(ScanState.FAILED)
        self.image = None
        self.error = None
        self._log.clear()
        self.state = ScanState.IDLE
