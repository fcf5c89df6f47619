"""
Two-Stage Validation Pipeline

DESIGN DECISION: A submission is validated in two distinct stages,
both BEFORE anything touches the ledger:

STAGE 1 - SCHEMA VALIDATION:
- Required fields present (amount, type, category, source)
- Types and formats (non-negative amount, known payment channel)
- Handled by the pydantic TransactionDraft model

STAGE 2 - CATALOG VALIDATION:
- The submitter's role may submit this transaction type
- The category is in the submitter's role-scoped catalog
- The sub-category belongs to the category
- Soft checks (future date, zero amount) are warnings only

Stage 2 is skipped when stage 1 fails.

IMPORTANT: Validation NEVER silently fixes issues.
Errors abort the submission; warnings are reported alongside.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import ValidationError as SchemaError

from finvue.exceptions import ValidationError
from finvue.models.ledger import (
    TransactionDraft,
    User,
    ValidationIssue,
)
from finvue.policy.catalog import (
    allowed_transaction_types,
    available_category_names,
    sub_categories_for,
)


class TransactionValidator:
    """
    Validates a submission through the two-stage pipeline.

    Stateless; one instance can be shared across threads.
    """

    def _validate_schema(
        self,
        raw: Union[TransactionDraft, dict[str, Any]],
    ) -> tuple[Optional[TransactionDraft], list[ValidationIssue]]:
        """
        Stage 1: parse into a TransactionDraft.

        Returns: (draft_or_None, list_of_issues)
        """
        if isinstance(raw, TransactionDraft):
            return raw, []

        try:
            return TransactionDraft.model_validate(raw), []
        except SchemaError as e:
            issues = []
            for error in e.errors():
                field = ".".join(str(part) for part in error["loc"]) or "draft"
                issue_type = "missing" if error["type"] == "missing" else "invalid_value"
                issues.append(ValidationIssue(
                    field=field,
                    issue_type=issue_type,
                    message=error["msg"],
                    severity="error",
                ))
            return None, issues

    def _validate_catalog(
        self,
        draft: TransactionDraft,
        submitter: User,
    ) -> list[ValidationIssue]:
        """
        Stage 2: role-scoped catalog checks plus soft sanity checks.
        """
        issues = []

        if draft.type not in allowed_transaction_types(submitter.role):
            issues.append(ValidationIssue(
                field="type",
                issue_type="not_allowed",
                message=f"{submitter.role.value} cannot submit {draft.type.value} entries",
                severity="error",
            ))
            # Category checks depend on the type, nothing more to say
            return issues

        if draft.category not in available_category_names(submitter.role, draft.type):
            issues.append(ValidationIssue(
                field="category",
                issue_type="not_allowed",
                message=f"Category '{draft.category}' is not available for {submitter.role.value}",
                severity="error",
                suggested_fix="Pick a category from the list offered for your role",
            ))

        if draft.sub_category is not None:
            options = sub_categories_for(draft.category)
            if draft.sub_category not in options:
                issues.append(ValidationIssue(
                    field="sub_category",
                    issue_type="invalid_value",
                    message=(
                        f"'{draft.sub_category}' is not a sub-category of '{draft.category}'"
                        if options else f"'{draft.category}' takes no sub-category"
                    ),
                    severity="error",
                ))

        if draft.occurred_on > date.today():
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({draft.occurred_on}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        if draft.amount == Decimal("0"):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message="Amount is zero",
                severity="warning",
            ))

        return issues

    def check(
        self,
        raw: Union[TransactionDraft, dict[str, Any]],
        submitter: User,
    ) -> tuple[Optional[TransactionDraft], list[ValidationIssue]]:
        """Run both stages without raising."""
        draft, issues = self._validate_schema(raw)
        if draft is None:
            return None, issues
        return draft, issues + self._validate_catalog(draft, submitter)

    def validate(
        self,
        raw: Union[TransactionDraft, dict[str, Any]],
        submitter: User,
    ) -> tuple[TransactionDraft, list[ValidationIssue]]:
        """
        Run the full pipeline.

        Returns the parsed draft and any warnings.

        Raises:
            ValidationError: If any error-severity issue was found
        """
        draft, issues = self.check(raw, submitter)
        errors = [i for i in issues if i.severity == "error"]
        if draft is None or errors:
            raise ValidationError(
                f"Submission rejected: {len(errors)} issue(s)",
                issues=errors,
            )
        return draft, [i for i in issues if i.severity != "error"]
