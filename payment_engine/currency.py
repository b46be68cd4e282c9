"""
Fixed-Point Currency Module

Monetary amounts are stored as a signed integer count of 1/10000 units
(4 decimal places of precision) bounded to the signed 64-bit range.
NEVER uses float for monetary values.
"""

from decimal import Decimal
from dataclasses import dataclass
import re

SCALE = 10_000
PRECISION = 4

MAX_UNITS = 2 ** 63 - 1
MIN_UNITS = -(2 ** 63)

_AMOUNT_PATTERN = re.compile(r"(?P<sign>[+-]?)(?P<integer>\d+)(?:\.(?P<fraction>\d*))?")


class InvalidFormat(ValueError):
    """Raised when text cannot be parsed as a currency amount"""


class CurrencyOverflow(OverflowError):
    """Raised when an amount leaves the signed 64-bit range"""


def _checked(units: int) -> int:
    if units > MAX_UNITS or units < MIN_UNITS:
        raise CurrencyOverflow(f"Amount of {units} units is outside the 64-bit range")
    return units


@dataclass(frozen=True, order=True)
class Currency:
    """
    Immutable fixed-point amount.

    ``units`` is the amount multiplied by 10000, so ``Currency(15000)``
    is 1.5. Arithmetic is exact integer arithmetic and raises
    CurrencyOverflow instead of wrapping.
    """
    units: int = 0

    def __post_init__(self):
        if not isinstance(self.units, int) or isinstance(self.units, bool):
            raise TypeError(f"Currency units must be int, got {type(self.units).__name__}")
        _checked(self.units)

    @classmethod
    def zero(cls) -> 'Currency':
        return cls(0)

    @classmethod
    def parse(cls, text: str) -> 'Currency':
        """
        Parse decimal text such as ``"1"``, ``"-1.5"`` or ``"0.0001"``

        Fewer than four fractional digits are right-padded with zeros.

        Args:
            text: Decimal representation without surrounding whitespace

        Returns:
            Parsed Currency

        Raises:
            InvalidFormat: If the text is not an integer or integer-plus-fraction,
                or the fraction has more than 4 digits
            CurrencyOverflow: If the value does not fit in 64 bits
        """
        if not isinstance(text, str):
            raise InvalidFormat(f"Cannot parse {text!r} as currency")

        match = _AMOUNT_PATTERN.fullmatch(text)
        if not match:
            raise InvalidFormat(f"Cannot parse {text!r} as currency")

        fraction = match.group("fraction") or ""
        if len(fraction) > PRECISION:
            raise InvalidFormat(
                f"Cannot parse {text!r} as currency: more than {PRECISION} fractional digits"
            )

        magnitude = int(match.group("integer")) * SCALE + int(fraction.ljust(PRECISION, "0"))
        if match.group("sign") == "-":
            magnitude = -magnitude
        return cls(_checked(magnitude))

    def __add__(self, other: 'Currency') -> 'Currency':
        if not isinstance(other, Currency):
            return NotImplemented
        return Currency(_checked(self.units + other.units))

    def __sub__(self, other: 'Currency') -> 'Currency':
        if not isinstance(other, Currency):
            return NotImplemented
        return Currency(_checked(self.units - other.units))

    def __neg__(self) -> 'Currency':
        return Currency(_checked(-self.units))

    def is_zero(self) -> bool:
        """Check if amount is exactly zero"""
        return self.units == 0

    def is_negative(self) -> bool:
        """Check if amount is negative"""
        return self.units < 0

    def to_decimal(self) -> Decimal:
        """Exact Decimal value of this amount"""
        return Decimal(self.units).scaleb(-PRECISION)

    def __str__(self) -> str:
        sign = "-" if self.units < 0 else ""
        integer, fraction = divmod(abs(self.units), SCALE)
        return f"{sign}{integer}.{fraction:0{PRECISION}d}"
