"""Common formatting helpers for monitor messages."""

from decimal import ROUND_HALF_UP, Context, Decimal, InvalidOperation

# characters with meaning in Telegram's legacy Markdown
_MARKDOWN_SPECIAL = ("\\", "_", "*", "`", "[")

# wide enough for any float or uint256 without rounding
_EXACT = Context(prec=400)


def to_float(amount: int, decimals: int = 18) -> float:
    """Convert a raw fixed-point amount to the nearest float."""
    return float(Decimal(amount).scaleb(-decimals, context=_EXACT))


def _fixed(number: float, places: int) -> str:
    # half-up on the exact binary value, never scientific notation
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(number).quantize(quantum, rounding=ROUND_HALF_UP, context=_EXACT)
    return f"{rounded:f}"


def format_compact(number: float) -> str:
    """Format number to a short readable string with K and M suffixes."""
    if number >= 1_000_000:
        return f"{_fixed(number / 1_000_000, 0 if number >= 10_000_000 else 2)} M"
    if number >= 1_000:
        return f"{_fixed(number / 1_000, 0 if number >= 100_000 else 1)} K"
    return _fixed(number, 0)


def format_magnitude(amount: int, decimals: int = 18) -> str:
    """Format a raw fixed-point token amount, e.g. ``1.23 M`` or ``23.5 K``."""
    return format_compact(to_float(amount, decimals))


def format_percent(part: int, total: int) -> str:
    """Percentage of ``total`` to one decimal place, or an em dash when total is zero."""
    if total == 0:
        return "—"
    # floor division on the integers keeps 18-decimal values exact
    per_mille = part * 1000 // total
    return f"{per_mille / 10:.1f} %"


def parse_units(value: str, decimals: int = 18) -> int:
    """
    Parse a decimal string into a fixed-point integer.

    Args:
        value: Decimal amount such as ``"50000"`` or ``"1.5"``
        decimals: Number of fixed-point decimals

    Returns:
        int: ``value * 10**decimals``

    Raises:
        ValueError: If the string is not a plain decimal or has more fractional digits than ``decimals``
    """
    try:
        amount = Decimal(value.strip())
    except (InvalidOperation, AttributeError) as e:
        raise ValueError(f"invalid decimal amount: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"invalid decimal amount: {value!r}")
    scaled = amount.scaleb(decimals, context=_EXACT)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"too many decimals in {value!r}, max {decimals}")
    return int(scaled)


def escape_markdown(text: str) -> str:
    """Escape free text for Telegram Markdown messages."""
    for char in _MARKDOWN_SPECIAL:
        text = text.replace(char, f"\\{char}")
    return text
