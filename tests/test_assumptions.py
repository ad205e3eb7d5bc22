from datetime import date

from app.domain.assumptions import (
    AssumptionBook,
    ExistingTerms,
    ReLease,
    Renewal,
    RiskTermination,
    VacancyFill,
    decode_assumption,
)
from app.schemas.budget import BudgetAssumption


def record(**overrides) -> BudgetAssumption:
    fields = {"id": "a1", "target_type": "Renewal", "target_id": "t1"}
    fields.update(overrides)
    return BudgetAssumption(**fields)


def test_decode_renewal_with_sign_date():
    decoded = decode_assumption(
        record(projected_sign_date=date(2025, 1, 1), projected_unit_price=3.0)
    )
    assert decoded == Renewal(target_id="t1", sign_date=date(2025, 1, 1), unit_price=3.0)


def test_decode_renewal_without_sign_date_has_no_effect():
    assert decode_assumption(record(projected_unit_price=3.0)) is None


def test_decode_release_strategy_needs_no_sign_date():
    decoded = decode_assumption(
        record(strategy="ReLease", projected_unit_price=2.5, vacancy_gap_months=3)
    )
    assert decoded == ReLease(target_id="t1", unit_price=2.5, vacancy_gap_months=3)


def test_decode_vacancy_fill():
    decoded = decode_assumption(
        record(
            target_type="Vacancy",
            target_id="u2",
            projected_sign_date=date(2024, 4, 1),
            projected_unit_price=2.0,
            projected_rent_free_months=1,
        )
    )
    assert isinstance(decoded, VacancyFill)
    assert decoded.rent_free_months == 1


def test_decode_risk_termination_keeps_optional_date():
    decoded = decode_assumption(record(target_type="RiskTermination", projected_unit_price=2.0))
    assert decoded == RiskTermination(target_id="t1", unit_price=2.0)


def test_decode_existing_ignores_inactive_payment_shift():
    """Test an Existing record with only an inactive shift decodes to nothing."""
    shift = {
        "isActive": False,
        "fromYear": 2024,
        "fromMonth": 2,
        "toYear": 2024,
        "toMonth": 5,
        "amount": 1000,
    }
    assert decode_assumption(record(target_type="Existing", payment_shift=shift)) is None

    decoded = decode_assumption(
        record(target_type="Existing", payment_shift={**shift, "isActive": True})
    )
    assert isinstance(decoded, ExistingTerms)
    assert decoded.payment_shift.amount == 1000
    assert decoded.price_adjustment is None


def test_book_keeps_last_record_per_target_and_type():
    book = AssumptionBook.from_records(
        [
            record(id="a1", projected_sign_date=date(2025, 1, 1), projected_unit_price=3.0),
            record(id="a2", projected_sign_date=date(2025, 2, 1), projected_unit_price=3.5),
        ]
    )
    found = book.get("t1", "Renewal")
    assert found.sign_date == date(2025, 2, 1)
    assert found.unit_price == 3.5


def test_book_strategy_for_risk_and_expiring_tenants():
    book = AssumptionBook.from_records(
        [
            record(projected_sign_date=date(2025, 1, 1), projected_unit_price=3.0),
            record(id="a2", target_type="RiskTermination", projected_unit_price=2.0),
        ]
    )

    assert isinstance(book.strategy_for("t1", is_risk=True, expiring=True), RiskTermination)
    assert isinstance(book.strategy_for("t1", is_risk=False, expiring=True), Renewal)
    assert book.strategy_for("t1", is_risk=False, expiring=False) is None
    assert book.existing_terms("t1") is None
    assert book.vacancy_fill("t1") is None
