"""Unit tests for amortization math"""

import pytest
from decimal import Decimal
from coopcredit.domain.amortization import (
    as_percentage,
    monthly_payment,
    monthly_rate,
    payment_to_income_ratio,
)
from factories import make_affiliate, make_application


def test_monthly_rate_rounds_each_step():
    # 12.5% -> 0.125000 -> 0.0104166.. -> 0.010417
    assert monthly_rate(Decimal("12.5")) == Decimal("0.010417")
    assert monthly_rate(Decimal("24")) == Decimal("0.020000")
    assert monthly_rate(Decimal("0")) == Decimal("0")


def test_monthly_rate_rounds_half_up():
    # 0.0006% -> 0.000006 / 12 = 0.0000005 -> 0.000001
    assert monthly_rate(Decimal("0.0006")) == Decimal("0.000001")


def test_monthly_payment_reference_loan():
    """5,000,000 over 36 months at 12.5% nominal"""
    assert monthly_payment(Decimal("5000000"), 36, Decimal("12.5")) == Decimal("167269.09")


def test_monthly_payment_two_percent_monthly():
    assert monthly_payment(Decimal("1000000"), 12, Decimal("24")) == Decimal("94559.60")


def test_monthly_payment_zero_rate_is_straight_division():
    assert monthly_payment(Decimal("1200000"), 12, Decimal("0")) == Decimal("100000.00")
    assert monthly_payment(Decimal("1000"), 3, Decimal("0")) == Decimal("333.33")


def test_monthly_payment_single_installment():
    # r = 0.01: P * 1.01
    assert monthly_payment(Decimal("1000"), 1, Decimal("12")) == Decimal("1010.00")


def test_monthly_payment_covers_principal():
    payment = monthly_payment(Decimal("5000000"), 36, Decimal("12.5"))
    assert payment * 36 > Decimal("5000000")


def test_monthly_payment_long_term_is_stable():
    payment = monthly_payment(Decimal("200000000"), 360, Decimal("18"))
    assert payment.as_tuple().exponent == -2
    assert payment > Decimal("200000000") * Decimal("0.015")


@pytest.mark.parametrize(
    "payment,income,expected",
    [
        (Decimal("167269.09"), Decimal("3000000"), Decimal("0.0558")),
        (Decimal("143400"), Decimal("1000000"), Decimal("0.1434")),
        (Decimal("2"), Decimal("3"), Decimal("0.6667")),
        (Decimal("1"), Decimal("20000"), Decimal("0.0001")),
    ],
)
def test_payment_to_income_ratio_rounds_to_four_places(payment, income, expected):
    assert payment_to_income_ratio(payment, income) == expected


def test_as_percentage():
    assert as_percentage(Decimal("0.1434")) == Decimal("14.34")
    assert as_percentage(Decimal("0.4")) == Decimal("40.00")


def test_ratio_boundary_is_inclusive():
    """Exactly 40% is acceptable; one basis point more is not"""
    affiliate = make_affiliate(salary="250000")

    at_limit = make_application(affiliate, amount="1200000", term=12, rate="0")
    over_limit = make_application(affiliate, amount="1200300", term=12, rate="0")

    assert at_limit.payment_to_income_ratio() == Decimal("0.4000")
    assert at_limit.has_acceptable_payment_to_income_ratio() is True
    assert over_limit.payment_to_income_ratio() == Decimal("0.4001")
    assert over_limit.has_acceptable_payment_to_income_ratio() is False


def test_amount_boundary_is_inclusive():
    affiliate = make_affiliate(salary="100000")

    assert make_application(affiliate, amount="1000000", term=360, rate="0").has_acceptable_amount() is True
    assert make_application(affiliate, amount="1000000.01", term=360, rate="0").has_acceptable_amount() is False


def test_application_totals():
    application = make_application(make_affiliate())

    assert application.monthly_payment() == Decimal("167269.09")
    assert application.total_payable() == Decimal("6021687.24")
    assert application.total_interest() == Decimal("1021687.24")
