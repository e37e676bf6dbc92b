from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

ZERO = Decimal("0.00")


class AmountParseError(ValueError):
    pass


def quantize_money(value: Decimal | float | int | str | None) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def parse_amount(value: Decimal | float | int | str | None) -> Decimal:
    """Parse a user-entered amount into a non-negative Decimal.

    Blank input (None or an empty/whitespace string) means zero. Anything else
    that is not a finite, non-negative number raises AmountParseError instead
    of being coerced to zero.
    """
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise AmountParseError(f"Invalid amount: {value!r}")
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return ZERO
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise AmountParseError(f"Invalid amount: {value!r}") from None
    if not amount.is_finite():
        raise AmountParseError(f"Invalid amount: {value!r}")
    if amount < 0:
        raise AmountParseError(f"Amount cannot be negative: {value!r}")
    return amount
