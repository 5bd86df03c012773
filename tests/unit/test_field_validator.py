import pytest

from webtocase.backend.models import FieldKind, FieldSpec
from webtocase.validation.field_validator import FieldValidator, collect_values, is_valid_email
from webtocase.validation.models import FieldErrorCode

FIELDS = (
    FieldSpec("SuppliedName", "Name", FieldKind.TEXT, required=True),
    FieldSpec("SuppliedEmail", "Email", FieldKind.EMAIL, required=True),
    FieldSpec("SuppliedPhone", "Phone", FieldKind.PHONE),
    FieldSpec("CcEmail", "CC", FieldKind.EMAIL),
)


class TestIsValidEmail:
    @pytest.mark.parametrize("value", ["a@b.co", "first.last@example.org", "x+y@sub.domain.io"])
    def test_accepts(self, value: str) -> None:
        assert is_valid_email(value)

    @pytest.mark.parametrize("value", ["a@b", "@b.co", "a b@c.co", "plain", "a@b .co"])
    def test_rejects(self, value: str) -> None:
        assert not is_valid_email(value)


class TestCollectValues:
    def test_trims_strings(self) -> None:
        assert collect_values({"Name": "  Ada  "}) == {"Name": "Ada"}

    def test_none_becomes_empty(self) -> None:
        assert collect_values({"Name": None}) == {"Name": ""}

    def test_drops_binary_values(self) -> None:
        assert collect_values({"Name": "Ada", "Upload": b"\x00\x01"}) == {"Name": "Ada"}


class TestFieldValidator:
    def test_valid_values_produce_no_errors(self) -> None:
        errors = FieldValidator().validate(
            {"SuppliedName": "Ada", "SuppliedEmail": "ada@example.org"}, FIELDS
        )

        assert errors == []

    def test_reports_every_missing_required_field(self) -> None:
        errors = FieldValidator().validate({}, FIELDS)

        assert [e.field for e in errors] == ["SuppliedName", "SuppliedEmail"]
        assert all(e.code == FieldErrorCode.REQUIRED for e in errors)
        assert errors[0].message == "Name is required."

    def test_whitespace_only_counts_as_missing(self) -> None:
        errors = FieldValidator().validate(
            {"SuppliedName": "   ", "SuppliedEmail": "ada@example.org"}, FIELDS
        )

        assert [e.field for e in errors] == ["SuppliedName"]

    def test_invalid_email(self) -> None:
        errors = FieldValidator().validate(
            {"SuppliedName": "Ada", "SuppliedEmail": "not-an-email"}, FIELDS
        )

        assert len(errors) == 1
        assert errors[0].code == FieldErrorCode.INVALID_EMAIL
        assert errors[0].message == "Please enter a valid email address."

    def test_optional_email_checked_only_when_present(self) -> None:
        values = {"SuppliedName": "Ada", "SuppliedEmail": "ada@example.org"}

        assert FieldValidator().validate({**values, "CcEmail": ""}, FIELDS) == []
        errors = FieldValidator().validate({**values, "CcEmail": "nope"}, FIELDS)
        assert [e.field for e in errors] == ["CcEmail"]

    def test_phone_format_not_checked(self) -> None:
        errors = FieldValidator().validate(
            {"SuppliedName": "Ada", "SuppliedEmail": "ada@example.org", "SuppliedPhone": "call me"},
            FIELDS,
        )

        assert errors == []

    def test_unlabelled_field_uses_generic_label(self) -> None:
        errors = FieldValidator().validate({}, (FieldSpec("Subject", "", required=True),))

        assert errors[0].message == "This field is required."
