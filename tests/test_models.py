from datetime import date

import pytest

from freelance_ledger.models import (
    Collaboration,
    CollaborationSettings,
    ExpenseEntry,
    IncomeEntry,
    Member,
    UserRef,
    ValidationError,
    parse_amount,
    parse_date,
)


def test_income_from_backend_payload() -> None:
    """Backend objects use camelCase keys, '_id' and ISO datetimes."""
    entry = IncomeEntry.from_dict(
        {
            "_id": "64f0a",
            "workDate": "2025-04-01T00:00:00.000Z",
            "date": "2025-04-08T00:00:00.000Z",
            "jobTitle": " Landing page ",
            "clientName": "ACME",
            "amount": "1250.50",
            "category": "Web Development",
            "paymentStatus": "Pending",
            "currency": "eur",
            "hours": 10,
        }
    )

    assert entry.id == "64f0a"
    assert entry.date == date(2025, 4, 8)
    assert entry.work_date == date(2025, 4, 1)
    assert entry.job_title == "Landing page"
    assert entry.amount == pytest.approx(1250.5)
    assert entry.payment_status == "pending"
    assert entry.currency == "EUR"
    assert entry.hours == pytest.approx(10.0)


def test_income_defaults() -> None:
    entry = IncomeEntry.from_dict(
        {"id": "1", "date": "2025-01-02", "jobTitle": "Logo", "clientName": "X", "amount": 5}
    )

    assert entry.category == "Other"
    assert entry.payment_status == "paid"
    assert entry.currency == "USD"
    assert entry.work_date is None


def test_income_falls_back_to_work_date() -> None:
    entry = IncomeEntry.from_dict({"id": "1", "workDate": "2025-06-30", "amount": 1})

    assert entry.date == date(2025, 6, 30)


def test_income_rejects_unknown_payment_status() -> None:
    with pytest.raises(ValidationError, match="paymentStatus"):
        IncomeEntry.from_dict(
            {"id": "1", "date": "2025-01-02", "amount": 5, "paymentStatus": "late"}
        )


def test_expense_from_backend_payload() -> None:
    entry = ExpenseEntry.from_dict(
        {
            "_id": "e1",
            "date": "2025-04-10",
            "title": "Figma subscription",
            "amount": 15,
            "category": "Software",
            "vendor": "Figma",
            "isTaxDeductible": True,
        }
    )

    assert entry.title == "Figma subscription"
    assert entry.vendor == "Figma"
    assert entry.is_tax_deductible is True
    assert entry.status is None


@pytest.mark.parametrize("amount", [-1, "abc", None, True, float("nan"), float("inf")])
def test_parse_amount_rejects_invalid_values(amount) -> None:
    with pytest.raises(ValidationError):
        parse_amount(amount)


def test_parse_date_rejects_garbage() -> None:
    with pytest.raises(ValidationError):
        parse_date("08/04/2025")


def test_validation_error_is_a_value_error() -> None:
    """Callers catching ValueError also catch validation failures."""
    with pytest.raises(ValueError):
        parse_date("")


def test_collaboration_from_dict_with_members() -> None:
    collab = Collaboration.from_dict(
        {
            "_id": "c1",
            "name": "Design Studio",
            "description": "Shared agency work",
            "owner": "u1",
            "members": [
                {
                    "user": {"_id": "u1", "firstName": "Ada", "lastName": "Lovelace"},
                    "role": "admin",
                    "sharePercentage": 60,
                },
                {"user": "u2", "sharePercentage": 40, "status": "pending"},
            ],
            "settings": {"visibility": "invite-only", "allowMemberInvites": True},
            "tags": ["design"],
        }
    )

    assert collab.owner == UserRef(id="u1")
    assert [m.member_id for m in collab.members] == ["u1", "u2"]
    assert collab.members[0].name == "Ada Lovelace"
    assert collab.members[1].status == "pending"
    assert collab.total_share_percentage == pytest.approx(100.0)
    assert collab.settings.visibility == "invite-only"
    assert collab.settings.allow_member_invites is True
    assert collab.tags == ("design",)


def test_named_members_skips_blank_names() -> None:
    collab = Collaboration(
        id="c1",
        name="Team",
        members=(
            Member(user=UserRef(id="u1", first_name="Ada"), share_percentage=50),
            Member(user=UserRef(id="u2"), share_percentage=50),
        ),
    )

    assert [m.member_id for m in collab.named_members] == ["u1"]


def test_member_share_above_100_is_rejected() -> None:
    with pytest.raises(ValidationError, match="sharePercentage"):
        Member.from_dict({"user": "u1", "sharePercentage": 120})


@pytest.mark.parametrize(
    "raw, expected",
    [(True, True), (False, False), ("false", False), ("Yes", True), ("", None), (None, None)],
)
def test_expense_tax_deductible_flag(raw, expected) -> None:
    entry = ExpenseEntry.from_dict(
        {"id": "e1", "date": "2025-04-10", "title": "Figma", "amount": 15, "isTaxDeductible": raw}
    )

    assert entry.is_tax_deductible is expected


def test_expense_tax_deductible_rejects_garbage() -> None:
    with pytest.raises(ValidationError, match="isTaxDeductible"):
        ExpenseEntry.from_dict(
            {"id": "e1", "date": "2025-04-10", "amount": 15, "isTaxDeductible": "maybe"}
        )


def test_collaboration_settings_string_flags() -> None:
    settings = CollaborationSettings.from_dict(
        {"allowIncomeSharing": "false", "requireApproval": "no"}
    )

    assert settings.allow_income_sharing is False
    assert settings.require_approval is False
    assert settings.allow_expense_sharing is True


def test_member_must_be_an_object() -> None:
    with pytest.raises(ValidationError, match="member"):
        Member.from_dict("u1")
