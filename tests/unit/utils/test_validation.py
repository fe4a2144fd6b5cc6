"""Tests for field validation utilities."""
import pytest

from navaspurthi.utils.validation import (
    normalize_email,
    normalize_event_key,
    normalize_name,
    slugify,
    validate_email,
    validate_name,
    validate_phone,
    validate_year,
)


class TestValidateName:
    def test_valid_name(self):
        assert validate_name("Asha Rao") == (True, "")

    def test_empty_name(self):
        assert validate_name("   ") == (False, "Name is required")

    def test_name_exactly_100_chars(self):
        assert validate_name("A" * 100) == (True, "")

    def test_name_exceeds_100_chars(self):
        assert validate_name("A" * 101) == (False, "Name cannot exceed 100 characters")


class TestValidateEmail:
    @pytest.mark.parametrize("email", ["asha@example.com", "a.b+fest@college.ac.in"])
    def test_valid(self, email):
        assert validate_email(email) == (True, "")

    @pytest.mark.parametrize("email", ["asha", "asha@", "asha@example", "as ha@example.com"])
    def test_invalid(self, email):
        assert validate_email(email) == (False, "Invalid email format")

    def test_missing(self):
        assert validate_email(None) == (False, "Email is required")


class TestValidatePhone:
    @pytest.mark.parametrize("phone", ["9876543210", "+91 98765 43210", "(080) 2345-6789", None, ""])
    def test_valid(self, phone):
        assert validate_phone(phone)[0] is True

    @pytest.mark.parametrize("phone", ["12", "phone", "98765-abc-10"])
    def test_invalid(self, phone):
        assert validate_phone(phone) == (False, "Invalid phone number format")


class TestValidateYear:
    @pytest.mark.parametrize("year", ["1st", "2nd", "3rd", "4th", None, ""])
    def test_valid(self, year):
        assert validate_year(year)[0] is True

    def test_invalid(self):
        assert validate_year("5th") == (False, "Year must be one of: 1st, 2nd, 3rd, 4th")


class TestNormalizers:
    def test_normalize_email(self):
        assert normalize_email(" Asha@Example.COM ") == "asha@example.com"

    @pytest.mark.parametrize("name", ["Group Dance", "group-dance", "GROUP_DANCE", " groupdance "])
    def test_normalize_event_key(self, name):
        assert normalize_event_key(name) == "groupdance"

    def test_normalize_name_collapses_spaces(self):
        assert normalize_name("  Asha   Rao ") == "asha rao"

    def test_slugify(self):
        assert slugify("Best out of Waste!") == "best-out-of-waste"

    def test_slugify_fallback(self):
        assert slugify("???") == "participant"
