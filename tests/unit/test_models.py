"""Unit tests for data models."""

import pytest
from pydantic import ValidationError

from fuelscan.errors import InvalidImageError
from fuelscan.models import (
    ParseOutcome,
    PrefillData,
    Provider,
    ReceiptFields,
    ReceiptImage,
    ScanResult,
    ScanState,
    UsageMetrics,
)
from tests.utils import make_receipt_image


class TestReceiptFields:
    """Test cases for ReceiptFields model."""

    def test_missing_fields_default_to_none(self):
        """Test that absent fields are None rather than zero."""
        fields = ReceiptFields()
        assert fields.gallons is None
        assert fields.price_per_gallon is None
        assert fields.total_cost is None
        assert fields.date is None

    def test_decode_from_camel_case_json(self):
        """Test that the JSON keys the model produces map onto the fields."""
        fields = ReceiptFields.model_validate_json(
            '{"gallons": 12.45, "pricePerGallon": 3.459, '
            '"totalCost": 43.06, "date": "2025-01-15"}'
        )
        assert fields.gallons == 12.45
        assert fields.price_per_gallon == 3.459
        assert fields.total_cost == 43.06
        assert fields.date == "2025-01-15"

    def test_integer_values_accepted(self):
        """Test that whole numbers decode as floats."""
        fields = ReceiptFields.model_validate_json('{"gallons": 10, "totalCost": 40}')
        assert fields.gallons == 10.0
        assert fields.total_cost == 40.0

    def test_string_number_rejected(self):
        """Test that a quoted number is a type mismatch."""
        with pytest.raises(ValidationError):
            ReceiptFields.model_validate_json('{"gallons": "12.45"}')

    def test_unknown_fields_ignored(self):
        """Test that extra keys in the reply are dropped."""
        fields = ReceiptFields.model_validate_json(
            '{"gallons": 5.0, "station": "Shell", "grade": "regular"}'
        )
        assert fields.gallons == 5.0
        assert not hasattr(fields, "station")

    def test_snake_case_keys_ignored(self):
        """Test that only the camelCase keys populate the price and total."""
        fields = ReceiptFields.model_validate_json(
            '{"gallons": 5.0, "price_per_gallon": 3.5, "total_cost": 17.5}'
        )
        assert fields.gallons == 5.0
        assert fields.price_per_gallon is None
        assert fields.total_cost is None

    def test_snake_case_total_alone_is_not_valid(self):
        fields = ReceiptFields.model_validate_json('{"total_cost": 17.5}')
        assert fields.is_valid is False

    def test_is_frozen(self):
        """Test that parsed fields cannot be modified."""
        fields = ReceiptFields(gallons=1.0)
        with pytest.raises(ValidationError):
            fields.gallons = 2.0

    @pytest.mark.parametrize(
        "kwargs, expected",
        [
            ({}, False),
            ({"pricePerGallon": 3.5, "date": "2025-01-01"}, False),
            ({"gallons": 10.0}, True),
            ({"totalCost": 35.0}, True),
            ({"gallons": 10.0, "totalCost": 35.0}, True),
            ({"totalCost": 35.0, "pricePerGallon": 3.5, "date": None}, True),
        ],
    )
    def test_is_valid(self, kwargs, expected):
        """Test that validity needs gallons or total cost."""
        assert ReceiptFields(**kwargs).is_valid is expected


class TestUsageMetrics:
    """Test cases for UsageMetrics model."""

    def test_total_tokens(self):
        usage = UsageMetrics(input_tokens=500, output_tokens=42, provider_name="Claude")
        assert usage.total_tokens == 542

    def test_counts_default_to_zero(self):
        usage = UsageMetrics(provider_name="ChatGPT")
        assert usage.input_tokens == 0
        assert usage.output_tokens == 0
        assert usage.total_tokens == 0

    def test_negative_counts_rejected(self):
        with pytest.raises(ValidationError):
            UsageMetrics(input_tokens=-1, output_tokens=0, provider_name="Claude")


class TestPrefillData:
    """Test cases for PrefillData model."""

    def test_from_receipt_drops_date(self):
        """Test that the date does not cross into prefill data."""
        fields = ReceiptFields(
            gallons=12.45, pricePerGallon=3.459, totalCost=43.06, date="2025-01-15"
        )
        prefill = PrefillData.from_receipt(fields)
        assert prefill.gallons == 12.45
        assert prefill.price_per_gallon == 3.459
        assert prefill.total_cost == 43.06
        assert "date" not in prefill.model_dump()

    def test_from_receipt_keeps_missing_values(self):
        prefill = PrefillData.from_receipt(ReceiptFields(totalCost=20.0))
        assert prefill.gallons is None
        assert prefill.price_per_gallon is None
        assert prefill.total_cost == 20.0

    def test_parse_outcome_pairs_fields_and_usage(self):
        outcome = ParseOutcome(
            receipt_data=ReceiptFields(gallons=3.0),
            usage=UsageMetrics(input_tokens=1, output_tokens=2, provider_name="Claude"),
        )
        assert outcome.receipt_data.gallons == 3.0
        assert outcome.usage.provider_name == "Claude"


class TestProvider:
    """Test cases for Provider enum."""

    def test_preference_order(self):
        assert list(Provider) == [Provider.CLAUDE, Provider.CHATGPT]

    def test_display_names(self):
        assert Provider.CLAUDE.display_name == "Claude"
        assert Provider.CHATGPT.display_name == "ChatGPT"

    def test_env_vars(self):
        assert Provider.CLAUDE.env_var == "ANTHROPIC_API_KEY"
        assert Provider.CHATGPT.env_var == "OPENAI_API_KEY"


class TestReceiptImage:
    """Test cases for ReceiptImage model."""

    def test_dimensions(self):
        image = make_receipt_image(width=120, height=300)
        assert image.dimensions() == (120, 300)

    def test_dimensions_of_invalid_bytes(self):
        image = ReceiptImage(content=b"definitely not an image")
        with pytest.raises(InvalidImageError):
            image.dimensions()

    def test_from_path(self, tmp_path):
        source = make_receipt_image()
        path = tmp_path / "receipt.png"
        path.write_bytes(source.content)

        image = ReceiptImage.from_path(path)
        assert image.content == source.content
        assert image.source == str(path)

    def test_from_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ReceiptImage.from_path(tmp_path / "missing.jpg")

    def test_from_directory_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ReceiptImage.from_path(tmp_path)


class TestScanResult:
    def test_succeeded(self):
        assert ScanResult(state=ScanState.COMPLETE).succeeded is True
        assert ScanResult(state=ScanState.FAILED).succeeded is False
