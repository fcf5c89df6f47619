"""Tests for the two-stage submission validator."""

from datetime import date, timedelta

import pytest

from finvue.exceptions import ValidationError
from finvue.models.ledger import TransactionType, User, UserRole
from finvue.validation import TransactionValidator


EMPLOYEE = User(id="e1", username="emil", role=UserRole.EMPLOYEE)
BILLING = User(id="b1", username="bill", role=UserRole.BILLING_EXECUTIVE)
MANAGER = User(id="m1", username="maria", role=UserRole.MANAGER)


@pytest.fixture
def validator():
    return TransactionValidator()


class TestSchemaStage:
    """Stage 1: structure and types."""

    def test_missing_fields_are_reported(self, validator):
        """Test that each missing required field becomes an issue."""
        with pytest.raises(ValidationError) as exc_info:
            validator.validate({"type": "EXPENSE"}, BILLING)
        fields = {issue.field for issue in exc_info.value.issues}
        assert {"amount", "category", "source"} <= fields
        assert all(issue.issue_type == "missing" for issue in exc_info.value.issues)

    def test_negative_amount(self, validator, make_draft):
        """Test that a negative amount is invalid."""
        with pytest.raises(ValidationError) as exc_info:
            validator.validate(make_draft(amount="-5"), BILLING)
        assert exc_info.value.issues[0].field == "amount"
        assert exc_info.value.issues[0].issue_type == "invalid_value"

    def test_schema_failure_skips_catalog_stage(self, validator):
        """Test that stage 2 does not run on a broken draft."""
        draft, issues = validator.check({"type": "INCOME"}, EMPLOYEE)
        assert draft is None
        assert all(issue.field != "type" for issue in issues)


class TestCatalogStage:
    """Stage 2: role-scoped catalog checks."""

    def test_valid_submission(self, validator, make_draft):
        """Test a clean submission."""
        draft, warnings = validator.validate(make_draft(category="Rent"), BILLING)
        assert draft.category == "Rent"
        assert draft.type == TransactionType.EXPENSE
        assert warnings == []

    def test_employee_cannot_submit_income(self, validator, make_draft):
        """Test that the income type is refused for employees."""
        with pytest.raises(ValidationError) as exc_info:
            validator.validate(make_draft(type="INCOME", category="Gift"), EMPLOYEE)
        assert exc_info.value.issues[0].field == "type"

    def test_employee_limited_to_conveyance(self, validator, make_draft):
        """Test that employees cannot pick other expense categories."""
        with pytest.raises(ValidationError) as exc_info:
            validator.validate(make_draft(category="Rent"), EMPLOYEE)
        assert exc_info.value.issues[0].issue_type == "not_allowed"

    def test_admin_only_category(self, validator, make_draft):
        """Test that Family is open to managers but not billing executives."""
        validator.validate(make_draft(category="Family"), MANAGER)
        with pytest.raises(ValidationError):
            validator.validate(make_draft(category="Family"), BILLING)

    def test_income_category_must_come_from_income_catalog(self, validator, make_draft):
        """Test that an expense category is refused for income."""
        with pytest.raises(ValidationError):
            validator.validate(make_draft(type="INCOME", category="Rent"), BILLING)

    def test_sub_category_must_belong(self, validator, make_draft):
        """Test sub-category membership."""
        validator.validate(make_draft(subCategory="Bus"), EMPLOYEE)
        with pytest.raises(ValidationError):
            validator.validate(make_draft(subCategory="Bonna"), EMPLOYEE)
        with pytest.raises(ValidationError):
            validator.validate(make_draft(category="Rent", subCategory="Bus"), BILLING)

    def test_future_date_is_a_warning(self, validator, make_draft):
        """Test that future dates are flagged but accepted."""
        tomorrow = (date.today() + timedelta(days=1)).isoformat()
        draft, warnings = validator.validate(make_draft(on=tomorrow), EMPLOYEE)
        assert draft is not None
        assert [w.issue_type for w in warnings] == ["future_date"]

    def test_zero_amount_is_a_warning(self, validator, make_draft):
        """Test that zero amounts are flagged but accepted."""
        _, warnings = validator.validate(make_draft(amount="0"), EMPLOYEE)
        assert [w.field for w in warnings] == ["amount"]
