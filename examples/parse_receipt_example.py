"""Example usage of the receipt parser on already-extracted OCR text.

This example skips OCR and shows how the configured provider turns receipt
text into structured fields. Set ANTHROPIC_API_KEY or OPENAI_API_KEY (or
store one with `fuelscan keys set`) before running it.
"""

import asyncio

from dotenv import load_dotenv

from fuelscan.errors import ScanError
from fuelscan.integrations import DotenvSecretStore
from fuelscan.orchestrator import ReceiptParser, default_routes

load_dotenv()


async def main():
    """Example of extracting fuel purchase data from OCR text."""
    receipt_parser = ReceiptParser(DotenvSecretStore(), default_routes())

    if not receipt_parser.has_any_credential():
        print("No API key configured. Run: fuelscan keys set claude <key>")
        return

    # Sample OCR text from a gas station receipt
    ocr_text = """
    SHELL
    1234 MAIN ST
    01/15/2025  08:12
    PUMP # 04   UNLEADED
    GALLONS      12.450
    PRICE/GAL   $3.459
    FUEL TOTAL  $43.06
    """

    try:
        outcome = await receipt_parser.parse_fuel_receipt(ocr_text)
    except ScanError as e:
        print(f"Error during extraction: {e}")
        return

    fields = outcome.receipt_data
    print(f"Gallons: {fields.gallons}")
    print(f"Price per gallon: {fields.price_per_gallon}")
    print(f"Total cost: {fields.total_cost}")
    print(f"Date: {fields.date}")
    print(f"Usable: {fields.is_valid}")

    usage = outcome.usage
    print(f"\nProvider: {usage.provider_name}")
    print(f"Input tokens: {usage.input_tokens}")
    print(f"Output tokens: {usage.output_tokens}")


if __name__ == "__main__":
    asyncio.run(main())
