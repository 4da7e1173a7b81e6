"""Exact conversion between raw token amounts and decimal strings."""


def format_amount(amount_raw: int, decimals: int) -> str:
    """Shift `amount_raw` by `decimals` places. Always keeps one fractional digit.

    >>> format_amount(1_000_000_000_000_000_000, 18)
    '1.0'
    >>> format_amount(1_500_000, 6)
    '1.5'
    """
    if amount_raw < 0:
        raise ValueError(f"amount must be non-negative, got {amount_raw}")
    if decimals == 0:
        return f"{amount_raw}.0"
    whole, frac = divmod(amount_raw, 10**decimals)
    frac_str = str(frac).rjust(decimals, "0").rstrip("0") or "0"
    return f"{whole}.{frac_str}"


def parse_amount(text: str, decimals: int) -> int:
    """Inverse of format_amount. Rejects values with more precision than `decimals`."""
    text = text.strip()
    if not text or text.startswith(("-", "+")):
        raise ValueError(f"invalid amount: {text!r}")
    whole, _, frac = text.partition(".")
    if not (whole or frac) or not (whole or "0").isdigit() or (frac and not frac.isdigit()):
        raise ValueError(f"invalid amount: {text!r}")

    significant = frac.rstrip("0")
    if len(significant) > decimals:
        raise ValueError(f"{text!r} has more than {decimals} decimal places")
    return int(whole or "0") * 10**decimals + int(significant.ljust(decimals, "0") or "0")
