"""Decimal helpers for X12 monetary and quantity elements."""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Optional, Union

from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)

# X12 monetary amounts carry exactly two decimal places
FINANCIAL_PRECISION = Decimal("0.01")

Number = Union[str, int, float, Decimal]


def parse_decimal(value: Optional[Number], precision: Optional[Decimal] = None) -> Optional[Decimal]:
    """
    Parse a value to Decimal, optionally quantized.

    An empty or whitespace-only string is an absent element and yields None;
    the literal "0" yields Decimal("0").

    Example:
        >>> parse_decimal("123.456", precision=Decimal("0.01"))
        Decimal('123.46')
        >>> parse_decimal("") is None
        True
    """
    if value is None:
        return None

    if isinstance(value, bool):
        logger.warning("Unsupported type for decimal parsing", type="bool")
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        try:
            result = Decimal(str(value))
        except (ValueError, InvalidOperation) as e:
            logger.warning("Failed to convert numeric value to Decimal", value=value, error=str(e))
            return None
    elif isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            result = Decimal(value)
        except (ValueError, InvalidOperation) as e:
            logger.warning("Failed to parse decimal string", value=value, error=str(e))
            return None
    else:
        logger.warning("Unsupported type for decimal parsing", type=type(value).__name__)
        return None

    if not result.is_finite():
        logger.warning("Non-finite decimal value", value=str(result))
        return None

    if precision is not None:
        try:
            result = result.quantize(precision, rounding=ROUND_HALF_UP)
        except InvalidOperation as e:
            logger.warning("Failed to quantize decimal value", value=str(result), error=str(e))
            return None

    return result


def parse_financial_amount(value: Optional[Number]) -> Optional[Decimal]:
    """
    Parse a monetary element with 2 decimal place precision.

    Example:
        >>> parse_financial_amount("100")
        Decimal('100.00')
    """
    return parse_decimal(value, precision=FINANCIAL_PRECISION)


def format_amount(value: Number) -> str:
    """
    Render a monetary amount for an X12 element.

    Always two decimal digits, no thousands separator, no currency symbol.

    Example:
        >>> format_amount(300)
        '300.00'
        >>> format_amount("1234.5")
        '1234.50'
    """
    amount = parse_financial_amount(value)
    if amount is None:
        raise ValueError(f"Not a monetary amount: {value!r}")
    return f"{amount:.2f}"


def format_quantity(value: Number) -> str:
    """Render a unit count, dropping a zero fractional part ("2.0" -> "2")."""
    quantity = parse_decimal(value)
    if quantity is None:
        raise ValueError(f"Not a quantity: {value!r}")
    if quantity == quantity.to_integral_value():
        return str(int(quantity))
    return format(quantity.normalize(), "f")


def sum_amounts(values: Iterable[Optional[Decimal]]) -> Decimal:
    """Sum amounts, skipping absent ones, quantized to 2 decimal places."""
    total = sum((v for v in values if v is not None), Decimal("0"))
    return total.quantize(FINANCIAL_PRECISION, rounding=ROUND_HALF_UP)
