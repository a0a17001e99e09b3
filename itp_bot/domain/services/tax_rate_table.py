"""Regional ITP rate table and rate resolution.

The table is static data: each autonomous community (plus Ceuta and Melilla)
has a base rate and, for a few regions, a high-power surcharge or a resident
discount. Table order is the order regions are numbered in the conversation.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from itp_bot.domain.value_objects.tax_rate import TaxRate, to_decimal

DEFAULT_RATE = TaxRate(Decimal("0.04"))
HIGH_POWER_RATE = TaxRate(Decimal("0.08"))
HIGH_POWER_THRESHOLD_CV = Decimal("15")


@dataclass(frozen=True)
class RegionRule:
    """Rate rules for one region."""

    name: str
    base_rate: TaxRate
    high_power_surcharge: bool = False
    resident_discount: bool = False
    display_note: str = ""

    def annotations(self) -> list[str]:
        """Qualitative notes shown next to the rate in listings."""
        notes = []
        if self.display_note:
            notes.append(self.display_note)
        if self.high_power_surcharge:
            notes.append(
                f"({HIGH_POWER_RATE.as_percentage()} si >{HIGH_POWER_THRESHOLD_CV} CV)"
            )
        if self.resident_discount:
            notes.append(f"({self.base_rate.halved().as_percentage()} residentes)")
        return notes


@dataclass(frozen=True)
class RateResolution:
    """Effective rate for a transfer and the special rules that produced it."""

    rate: TaxRate
    notes: tuple[str, ...] = ()


def _rate(value: str) -> TaxRate:
    return TaxRate(Decimal(value))


REGIONS: tuple[RegionRule, ...] = (
    RegionRule("Galicia", _rate("0.03"), display_note="⭐ ¡Más barato!"),
    RegionRule("Andalucía", _rate("0.04"), high_power_surcharge=True),
    RegionRule("Aragón", _rate("0.04")),
    RegionRule("Asturias", _rate("0.04"), high_power_surcharge=True),
    RegionRule("Baleares", _rate("0.04"), high_power_surcharge=True),
    RegionRule("La Rioja", _rate("0.04")),
    RegionRule("Madrid", _rate("0.04")),
    RegionRule("Murcia", _rate("0.04")),
    RegionRule("Navarra", _rate("0.04")),
    RegionRule("País Vasco", _rate("0.04")),
    RegionRule("Ceuta", _rate("0.04"), resident_discount=True),
    RegionRule("Melilla", _rate("0.04"), resident_discount=True),
    RegionRule("Castilla y León", _rate("0.05"), high_power_surcharge=True),
    RegionRule("Canarias", _rate("0.055")),
    RegionRule("Cataluña", _rate("0.05")),
    RegionRule("Castilla-La Mancha", _rate("0.06")),
    # Displacement-based surcharge; the catalog has no engine size so it is informative only
    RegionRule("Comunidad Valenciana", _rate("0.06"), display_note="(8% si >2000cc)"),
    RegionRule("Extremadura", _rate("0.06")),
    RegionRule("Cantabria", _rate("0.08"), display_note="⚠️ Más caro"),
)

_REGIONS_BY_NAME = {rule.name: rule for rule in REGIONS}


def get_region(name: str) -> Optional[RegionRule]:
    """Look up a region by its canonical name."""
    return _REGIONS_BY_NAME.get(name)


def region_names() -> list[str]:
    """Canonical region names in table order."""
    return [rule.name for rule in REGIONS]


def has_resident_discount(region: str) -> bool:
    """Whether the region asks the resident question (Ceuta and Melilla)."""
    rule = get_region(region)
    return rule is not None and rule.resident_discount


def resolve_rate(
    region: str,
    fiscal_power: Union[Decimal, float, int],
    is_resident: bool,
) -> RateResolution:
    """
    Resolve the effective ITP rate for a transfer.

    Unknown regions resolve to DEFAULT_RATE. The high-power surcharge applies
    first (strictly more than 15 CV), then the resident discount halves
    whatever rate is in force.

    Args:
        region: Canonical region name
        fiscal_power: Vehicle fiscal horsepower (CV)
        is_resident: Whether the buyer resides in the region

    Returns:
        Rate resolution with the final rate and the notes of applied rules
    """
    rule = get_region(region)
    if rule is None:
        return RateResolution(rate=DEFAULT_RATE)

    rate = rule.base_rate
    notes: list[str] = []

    if rule.high_power_surcharge and to_decimal(fiscal_power) > HIGH_POWER_THRESHOLD_CV:
        rate = HIGH_POWER_RATE
        notes.append(
            f"⚠️ Recargo por alta potencia (>{HIGH_POWER_THRESHOLD_CV} CV): "
            f"se aplica el {rate.as_percentage()}"
        )

    if rule.resident_discount and is_resident:
        rate = rate.halved()
        notes.append(f"✅ Descuento del 50% para residentes en {rule.name}")

    return RateResolution(rate=rate, notes=tuple(notes))


def render_rates_table() -> str:
    """Render every region and its rate, cheapest first, for the chat."""
    ordered = sorted(REGIONS, key=lambda rule: rule.base_rate.fraction)
    lines = []
    for rule in ordered:
        line = f"• *{rule.name}*: {rule.base_rate.as_percentage()}"
        annotations = rule.annotations()
        if annotations:
            line += " " + " ".join(annotations)
        lines.append(line)
    return "\n".join(lines)
