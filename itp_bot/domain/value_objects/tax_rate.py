"""Tax rate value object."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENT = Decimal("0.01")
ONE_DECIMAL = Decimal("0.1")


def to_decimal(value: Union[Decimal, float, int, str]) -> Decimal:
    """Convert a number to Decimal without binary float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class TaxRate:
    """Transfer tax rate expressed as an exact fraction (0.04 == 4%)."""

    fraction: Decimal

    def __post_init__(self) -> None:
        """Normalise and validate the fraction."""
        fraction = to_decimal(self.fraction)
        if fraction < 0 or fraction > 1:
            raise ValueError("Tax rate must be between 0 and 1")
        object.__setattr__(self, "fraction", fraction)

    def halved(self) -> "TaxRate":
        """Return half of this rate (resident discount)."""
        return TaxRate(self.fraction / 2)

    def apply_to(self, amount: Union[Decimal, float, int]) -> Decimal:
        """
        Compute the tax due on an amount.

        Args:
            amount: Taxable base in euros

        Returns:
            Tax rounded to cents, half-up on the cent boundary
        """
        return (to_decimal(amount) * self.fraction).quantize(CENT, rounding=ROUND_HALF_UP)

    def as_percentage(self) -> str:
        """Format as a percentage rounded to one decimal place ("4%", "5.5%")."""
        percent = (self.fraction * 100).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)
        return f"{percent.normalize():f}%"

    def __lt__(self, other: "TaxRate") -> bool:
        """Compare less than."""
        return self.fraction < other.fraction

    def __str__(self) -> str:
        return self.as_percentage()
