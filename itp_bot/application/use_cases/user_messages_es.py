"""Spanish user-facing messages for the ITP transfer assistant."""

from decimal import Decimal
from typing import Optional, Sequence

from itp_bot.application.dtos.transfer import TransferResult
from itp_bot.domain.entities.vehicle import Vehicle
from itp_bot.domain.services.tax_rate_table import REGIONS, render_rates_table
from itp_bot.domain.value_objects.tax_rate import to_decimal


def format_euros(amount) -> str:
    """Format an amount the Spanish way: 18.000 or 1.234,50."""
    value = to_decimal(amount)
    if value == value.to_integral_value():
        text = f"{value:,.0f}"
    else:
        text = f"{value:,.2f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_power(fiscal_power: Decimal) -> str:
    """Format fiscal horsepower without a trailing zero decimal."""
    return f"{fiscal_power.normalize():f}".replace(".", ",")


class UserMessagesES:
    """Centralized Spanish user-facing messages."""

    # Greeting, sent on reset
    WELCOME = (
        "🚗 *CALCULADORA DE TRANSFERENCIA DE COCHES*\n\n"
        "Te ayudo a calcular el ITP (Impuesto de Transmisiones Patrimoniales) "
        "para vehículos de segunda mano en España.\n\n"
        "ℹ️ *Info:* Uso tasas actualizadas a 2026\n"
        "💰 Desde 3% en Galicia hasta 8% en Cantabria\n\n"
        "¿Qué marca de coche te interesa?\n"
        "_Ejemplo: Toyota, Seat, BMW..._"
    )
    # Maker prompt when the stored step could not be resumed
    ASK_MAKER = (
        "🚗 *CALCULADORA DE TRANSFERENCIA*\n\n"
        "¿Qué marca de coche te interesa?\n"
        "_Ejemplo: Toyota, Seat, BMW..._"
    )
    SUGGESTED_MAKER = ["Toyota", "Seat", "BMW"]

    HELP = (
        "📋 *COMANDOS DISPONIBLES*\n\n"
        "• *inicio* - Nueva consulta\n"
        "• *tasas* - Ver tasas por región\n"
        "• *ayuda* - Este mensaje\n\n"
        "💡 Durante la consulta, responde a las preguntas paso a paso."
    )
    SUGGESTED_HELP = ["inicio", "tasas"]

    @staticmethod
    def rates() -> str:
        """Render the regional rate table."""
        return (
            "📊 *TASAS DE ITP POR COMUNIDAD (2026)*\n"
            "_Ordenado de más barato a más caro_\n\n"
            f"{render_rates_table()}\n\n"
            "⚠️ Algunas regiones aplican recargo para vehículos de alta potencia (>15 CV)"
        )

    # Year collection
    @staticmethod
    def ask_year(maker: str) -> str:
        """Confirm the maker and ask for the year."""
        return (
            f"✅ Marca: *{maker.upper()}*\n\n"
            "¿De qué año es el vehículo?\n"
            "_Ejemplo: 2020, 2019..._\n\n"
            "💡 Escribe *saltar* para ver todos los modelos"
        )

    SUGGESTED_YEAR = ["2020", "2019", "saltar"]

    INVALID_YEAR = '❌ Por favor, introduce un año válido (1990-2026) o escribe "saltar"'

    @staticmethod
    def no_results(maker: str, year: Optional[int]) -> str:
        """Nothing matched the search; back to the maker question."""
        year_text = f" del año {year}" if year else ""
        return (
            f"❌ No encontré coches *{maker}*{year_text}\n\n"
            "¿Quieres intentar con otra marca?"
        )

    # Model selection
    @staticmethod
    def model_list(
        maker: str, year: Optional[int], cars: Sequence[Vehicle], total: int
    ) -> str:
        """List the candidate models with 1-based numbers."""
        lines = [
            f"{index}. *{car.model}* ({car.year}) - {format_euros(car.fiscal_value)}€"
            for index, car in enumerate(cars, start=1)
        ]
        car_list = "\n".join(lines)
        if total > len(cars):
            car_list += f"\n\n_Y {total - len(cars)} modelos más..._"
        year_text = f" del {year}" if year else ""
        return (
            f"🚗 Encontré *{total}* modelos de *{maker.upper()}*{year_text}:\n\n"
            f"{car_list}\n\n"
            "_Escribe el número del modelo que te interese_"
        )

    @staticmethod
    def suggested_models(count: int) -> list[str]:
        """Suggest the first few list numbers."""
        return [str(number) for number in range(1, min(count, 3) + 1)]

    @staticmethod
    def invalid_selection(count: int) -> str:
        """Selection outside the listed range."""
        return f"❌ Por favor, escribe un número del 1 al {count}"

    # Region collection
    @staticmethod
    def vehicle_ask_region(vehicle: Vehicle) -> str:
        """Show the chosen vehicle and ask for the autonomous community."""
        return (
            f"🚗 *{vehicle.display_name}* ({vehicle.year})\n"
            f"💪 {format_power(vehicle.fiscal_power)} CV fiscales\n"
            f"💰 Valor fiscal: {format_euros(vehicle.fiscal_value)}€\n\n"
            "¿En qué comunidad autónoma se hará la transferencia?\n\n"
            f"_Escribe el nombre o número (1-{len(REGIONS)})_"
        )

    SUGGESTED_REGION = ["Madrid", "Cataluña", "Andalucía"]

    @staticmethod
    def invalid_region() -> str:
        """Unrecognised region, followed by the numbered list."""
        region_list = "\n".join(
            f"{index}. {rule.name}" for index, rule in enumerate(REGIONS, start=1)
        )
        return (
            "❌ No reconocí esa comunidad. Por favor, escribe el nombre o el número:\n\n"
            f"{region_list}"
        )

    # Resident check (Ceuta and Melilla)
    @staticmethod
    def ask_residency(region: str) -> str:
        """Ask whether the buyer lives in Ceuta or Melilla."""
        return (
            f"📍 Comunidad: *{region}*\n\n"
            f"¿Eres residente en {region}?\n"
            "(Los residentes tienen 50% de descuento: 2% en vez de 4%)\n\n"
            "_Responde: *si* o *no*_"
        )

    SUGGESTED_RESIDENCY = ["si", "no"]

    # Result
    @staticmethod
    def result(result: TransferResult) -> str:
        """Format the final calculation."""
        vehicle = result.vehicle
        message = (
            "📊 *RESULTADO DE LA TRANSFERENCIA*\n\n"
            f"🚗 Vehículo: *{vehicle.maker.upper()} {vehicle.model}* ({vehicle.year})\n"
            f"💪 {format_power(vehicle.fiscal_power)} CV fiscales\n"
            f"💰 Valor fiscal: {format_euros(result.fiscal_value)}€\n"
            f"📍 Comunidad: *{result.region}*\n"
            f"📈 Tipo impositivo: *{result.tax_rate}*\n\n"
            "━━━━━━━━━━━━━━━━━━━━━━\n"
            "💵 *IMPUESTO DE TRANSFERENCIAS*\n"
            f"   *{format_euros(result.calculated_tax)}€*\n"
            "━━━━━━━━━━━━━━━━━━━━━━"
        )
        if result.notes:
            message += "\n\n" + "\n".join(result.notes)
        message += (
            "\n\n⚠️ Este cálculo es orientativo. Pueden aplicarse otros gastos:\n"
            "   • Tasas DGT: ~55,70€\n"
            "   • Gestoría (si la usas)\n\n"
            '_Escribe "inicio" para una nueva consulta_'
        )
        return message

    SUGGESTED_COMPLETE = ["inicio", "tasas"]

    # Failures
    SEARCH_ERROR = "❌ Error al buscar coches. Por favor, intenta de nuevo más tarde."
    CALCULATION_ERROR = "❌ Error al calcular el impuesto. Por favor, intenta de nuevo más tarde."
    SESSION_ERROR = "❌ Ha ocurrido un error. Por favor, intenta de nuevo más tarde."
