from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, ndigits: int = 2) -> float:
    """Round to ``ndigits`` decimals with halves going up (2.345 -> 2.35).

    Works on the shortest decimal repr of ``value``, so binary noise such as
    2.345 * 100 == 234.49999999999997 does not flip a half downwards.
    """
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))
