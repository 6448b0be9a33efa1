import re
from functools import total_ordering
from typing import Optional

SCALE = 10_000
FRACTIONAL_DIGITS = 4

MIN_UNITS = -(2 ** 63)
MAX_UNITS = 2 ** 63 - 1

_AMOUNT_PATTERN = re.compile(r"^([+-]?)([0-9]*)(?:\.([0-9]*))?$")

# 2**63 - 1 has 19 digits
MAX_WHOLE_DIGITS = 19


class AmountError(ValueError):
    """Base error for amount parsing and arithmetic."""


class InvalidAmountFormatError(AmountError):
    pass


class TooManyFractionalDigitsError(AmountError):
    pass


class AmountOverflowError(AmountError):
    pass


def _checked(units: int) -> int:
    if units < MIN_UNITS or units > MAX_UNITS:
        raise AmountOverflowError(f"amount of {units} units is out of range")
    return units


@total_ordering
class Amount:
    """
    Fixed-point monetary value with exactly four fractional digits.
    Stored as an integer count of ten-thousandths, bounded to the signed 64-bit range.
    """

    __slots__ = ("_units",)

    def __init__(self, units: int = 0):
        self._units = _checked(units)

    @classmethod
    def zero(cls) -> "Amount":
        return cls(0)

    @classmethod
    def parse(cls, text: Optional[str]) -> "Amount":
        """
        Parse decimal text such as "1.5", "-0.25" or "42".

        Raises:
            InvalidAmountFormatError: text is empty or not a decimal number
            TooManyFractionalDigitsError: more than four digits after the point
            AmountOverflowError: value does not fit the representable range
        """
        if text is None:
            raise InvalidAmountFormatError("amount is missing")

        match = _AMOUNT_PATTERN.match(text.strip())
        if match is None:
            raise InvalidAmountFormatError(f"invalid amount {text!r}")

        sign, whole, fraction = match.groups()
        fraction = fraction or ""
        if not whole and not fraction:
            raise InvalidAmountFormatError(f"invalid amount {text!r}")
        if len(fraction) > FRACTIONAL_DIGITS:
            raise TooManyFractionalDigitsError(
                f"amount {text!r} has more than {FRACTIONAL_DIGITS} fractional digits"
            )

        whole = whole.lstrip("0")
        if len(whole) > MAX_WHOLE_DIGITS:
            raise AmountOverflowError(f"amount with {len(whole)} integer digits is out of range")

        units = int(whole or "0") * SCALE + int(fraction.ljust(FRACTIONAL_DIGITS, "0"))
        if sign == "-":
            units = -units
        return cls(units)

    @property
    def units(self) -> int:
        return self._units

    def is_negative(self) -> bool:
        return self._units < 0

    def format(self) -> str:
        whole, fraction = divmod(abs(self._units), SCALE)
        sign = "-" if self._units < 0 else ""
        return f"{sign}{whole}.{fraction:04d}"

    def __add__(self, other: "Amount") -> "Amount":
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(self._units + other._units)

    def __sub__(self, other: "Amount") -> "Amount":
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(self._units - other._units)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Amount):
            return NotImplemented
        return self._units == other._units

    def __lt__(self, other: "Amount") -> bool:
        if not isinstance(other, Amount):
            return NotImplemented
        return self._units < other._units

    def __hash__(self) -> int:
        return hash(self._units)

    def __str__(self) -> str:
        return self.format()

    def __repr__(self) -> str:
        return f"Amount({self.format()})"
