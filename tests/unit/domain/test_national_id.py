"""Unit tests for national ID format validation."""

import pytest

from src.domain.errors import ValidationError
from src.domain.services.national_id import (
    NATIONAL_ID_FORMAT_TAG,
    normalize_name,
    validate_national_id,
)


class TestValidateNationalId:
    def test_valid_id_returns_format_and_region(self) -> None:
        result = validate_national_id("3201010101010001")

        assert result.format_tag == NATIONAL_ID_FORMAT_TAG
        assert result.region_code == "32"

    @pytest.mark.parametrize(
        "national_id",
        ["", "320101010101000", "32010101010100011", "32010101010100AB", "３２０１０１０１０１０１０００１"],
    )
    def test_malformed_id_rejected(self, national_id: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_national_id(national_id)

        assert exc_info.value.field == "national_id"

    @pytest.mark.parametrize("region", ["00", "95", "99"])
    def test_out_of_range_region_rejected(self, region: str) -> None:
        with pytest.raises(ValidationError, match="province code"):
            validate_national_id(f"{region}01010101010001")

    @pytest.mark.parametrize("region", ["01", "94"])
    def test_region_bounds_accepted(self, region: str) -> None:
        assert validate_national_id(f"{region}01010101010001").region_code == region

    def test_error_message_never_contains_the_id(self) -> None:
        national_id = "3201010101ABCDEF"

        with pytest.raises(ValidationError) as exc_info:
            validate_national_id(national_id)

        assert national_id not in exc_info.value.message
        assert national_id not in str(exc_info.value.to_rfc7807("/x"))


class TestNormalizeName:
    def test_case_and_whitespace_insensitive(self) -> None:
        assert normalize_name("  siti   RAHMA ") == normalize_name("Siti Rahma")

    def test_none_is_empty(self) -> None:
        assert normalize_name(None) == ""
