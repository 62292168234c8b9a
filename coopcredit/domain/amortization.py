"""Fixed-point amortization math for credit applications"""

from decimal import Decimal, ROUND_HALF_UP, localcontext

CENTS = Decimal("0.01")
RATE_PLACES = Decimal("0.000001")
RATIO_PLACES = Decimal("0.0001")

ONE_HUNDRED = Decimal(100)
MONTHS_PER_YEAR = Decimal(12)

# Working precision for (1 + r)^n with n up to 360
_PRECISION = 60


def monthly_rate(annual_rate_percent: Decimal) -> Decimal:
    """
    Convert a nominal annual percentage into a monthly decimal rate.

    Both divisions are rounded to 6 fractional digits, half-up:
        12.5 -> 0.125000 -> 0.010417
    """
    annual = (annual_rate_percent / ONE_HUNDRED).quantize(RATE_PLACES, rounding=ROUND_HALF_UP)
    return (annual / MONTHS_PER_YEAR).quantize(RATE_PLACES, rounding=ROUND_HALF_UP)


def monthly_payment(principal: Decimal, term_months: int, annual_rate_percent: Decimal) -> Decimal:
    """
    Fixed monthly payment of an amortizing loan, rounded half-up to cents.

    Formula:
        r == 0:  P / n
        r  > 0:  P * r * (1 + r)^n / ((1 + r)^n - 1)

    Example:
        5,000,000 over 36 months at 12.5% -> 167,269.09
    """
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        n = Decimal(term_months)
        rate = monthly_rate(annual_rate_percent)

        if rate == 0:
            return (principal / n).quantize(CENTS, rounding=ROUND_HALF_UP)

        growth = (1 + rate) ** term_months
        payment = principal * rate * growth / (growth - 1)
        return payment.quantize(CENTS, rounding=ROUND_HALF_UP)


def payment_to_income_ratio(payment: Decimal, monthly_income: Decimal) -> Decimal:
    """Share of monthly income consumed by the payment, 4 fractional digits half-up"""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return (payment / monthly_income).quantize(RATIO_PLACES, rounding=ROUND_HALF_UP)


def as_percentage(ratio: Decimal) -> Decimal:
    """0.1434 -> 14.34"""
    return (ratio * ONE_HUNDRED).quantize(CENTS, rounding=ROUND_HALF_UP)
