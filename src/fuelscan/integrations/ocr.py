"""OCR Engine using Google Cloud Vision API for receipt text extraction."""

import threading
from typing import Protocol

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import vision

from fuelscan.errors import NoTextFoundError, RecognitionFailedError
from fuelscan.models import ReceiptImage


class TextExtractor(Protocol):
    """Anything that can turn a receipt image into raw text."""

    def extract_text(self, image: ReceiptImage) -> str: ...


class OCREngine:
    """
    OCR Engine for extracting text from receipt images using Google Vision API.

    This class provides a simple interface to Google Cloud Vision's text detection
    capabilities. It satisfies the TextExtractor protocol.
    """

    def __init__(self, client: vision.ImageAnnotatorClient | None = None) -> None:
        """
        Initialize the OCR Engine.

        Args:
            client: Optional pre-configured ImageAnnotatorClient.
                   If None, a default client will be created lazily on first use.
        """
        self._client = client
        self._client_initialized = client is not None
        self._client_lock = threading.Lock()

    @property
    def client(self) -> vision.ImageAnnotatorClient:
        """Lazily initialize and return the Vision API client.

        Uses double-check locking so concurrent scans running in executor
        threads create the client only once.

        Returns:
            The Google Cloud Vision ImageAnnotatorClient
        """
        if not self._client_initialized:
            with self._client_lock:
                if not self._client_initialized:
                    self._client = vision.ImageAnnotatorClient()
                    self._client_initialized = True
        return self._client  # type: ignore[return-value]

    def extract_text(self, image: ReceiptImage) -> str:
        """
        Extract text from a receipt image using Google Vision API.

        Args:
            image: The captured or selected receipt image.

        Returns:
            The full detected text.

        Raises:
            InvalidImageError: If the image bytes cannot be decoded.
            NoTextFoundError: If no text was recognized.
            RecognitionFailedError: If the Vision API call fails or Google
                credentials are missing or invalid.
        """
        # Reject undecodable bytes before paying for an API call
        image.dimensions()

        # vision.Image content expects bytes,
        # but type hints sometimes incorrectly expect a dict
        vision_image = vision.Image(content=image.content)  # type: ignore

        try:
            # text_detection is a dynamic method added at runtime,
            # which static analysis may not resolve
            response = self.client.text_detection(image=vision_image)  # type: ignore
        except (GoogleAPIError, GoogleAuthError) as e:
            # Credentials are resolved when the client is first created
            raise RecognitionFailedError(str(e)) from e

        if response.error.message:
            raise RecognitionFailedError(response.error.message)

        # The first annotation contains the entire detected text
        if not response.text_annotations:
            raise NoTextFoundError()
        text = response.text_annotations[0].description
        if not text or not text.strip():
            raise NoTextFoundError()

        return text
