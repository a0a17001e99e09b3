"""Conversation session entity.

A session's step is a tagged union: each variant carries only the data that
exists at that point of the conversation, so a session can never hold, for
example, a selected vehicle while still asking for the maker.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union

from itp_bot.domain.entities.vehicle import Vehicle

MAX_CANDIDATES = 10


class StepLabel(str, Enum):
    """Step labels as persisted and reported to clients."""

    WELCOME = "welcome"
    MAKER = "maker"
    YEAR = "year"
    MODEL_SELECTION = "model_selection"
    REGION = "region"
    RESIDENT_CHECK = "resident_check"


@dataclass(frozen=True)
class AwaitingMaker:
    """Waiting for a maker name. 'welcome' on first contact, 'maker' when returning."""

    returning: bool = False

    @property
    def label(self) -> StepLabel:
        return StepLabel.MAKER if self.returning else StepLabel.WELCOME


@dataclass(frozen=True)
class AwaitingYear:
    """Maker known, waiting for a year or 'saltar'."""

    maker: str
    label = StepLabel.YEAR


@dataclass(frozen=True)
class SelectingModel:
    """Search returned several vehicles, waiting for a 1-based choice."""

    maker: str
    year: Optional[int]
    cars: tuple[Vehicle, ...]
    label = StepLabel.MODEL_SELECTION

    def __post_init__(self) -> None:
        """Validate candidate list size."""
        object.__setattr__(self, "cars", tuple(self.cars))
        if not self.cars:
            raise ValueError("Model selection needs at least one candidate")
        if len(self.cars) > MAX_CANDIDATES:
            raise ValueError(f"At most {MAX_CANDIDATES} candidates can be offered")


@dataclass(frozen=True)
class AwaitingRegion:
    """Vehicle chosen, waiting for the autonomous community."""

    maker: str
    year: Optional[int]
    selected_car_id: str
    label = StepLabel.REGION


@dataclass(frozen=True)
class AwaitingResidency:
    """Ceuta or Melilla chosen, waiting for the resident answer."""

    maker: str
    year: Optional[int]
    selected_car_id: str
    region: str
    label = StepLabel.RESIDENT_CHECK


@dataclass(frozen=True)
class UnrecognizedStep:
    """A stored step label this version does not know."""

    raw_label: str

    @property
    def label(self) -> str:
        return self.raw_label


Step = Union[
    AwaitingMaker,
    AwaitingYear,
    SelectingModel,
    AwaitingRegion,
    AwaitingResidency,
    UnrecognizedStep,
]


def _label_value(step: Step) -> str:
    label = step.label
    return label.value if isinstance(label, StepLabel) else str(label)


@dataclass
class ConversationSession:
    """Conversation state for one user, keyed by phone number or channel id."""

    session_id: str
    step: Step = field(default_factory=AwaitingMaker)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = datetime.now(timezone.utc)

    @property
    def step_label(self) -> str:
        """Persisted label of the current step."""
        return _label_value(self.step)

    def advance(self, step: Step) -> None:
        """Move to a new step and refresh the timestamp."""
        self.step = step
        self.touch()

    def to_dict(self) -> dict[str, Any]:
        """
        Serialise to a JSON-compatible dictionary.

        Returns:
            Flat dictionary with the step label and the data of the current variant
        """
        step = self.step
        data: dict[str, Any] = {
            "session_id": self.session_id,
            "step": self.step_label,
            "maker": getattr(step, "maker", None),
            "year": getattr(step, "year", None),
            "cars": [car.to_dict() for car in step.cars]
            if isinstance(step, SelectingModel)
            else None,
            "selected_car_id": getattr(step, "selected_car_id", None),
            "region": getattr(step, "region", None),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConversationSession":
        """
        Deserialise from the dictionary produced by to_dict.

        Unknown step labels become UnrecognizedStep so the conversation can recover.

        Raises:
            KeyError: If a known step is missing its required data
            ValueError: If stored values are malformed
        """
        created_at = None
        updated_at = None
        if data.get("created_at"):
            created_at = datetime.fromisoformat(data["created_at"].replace("Z", "+00:00"))
        if data.get("updated_at"):
            updated_at = datetime.fromisoformat(data["updated_at"].replace("Z", "+00:00"))

        return cls(
            session_id=data["session_id"],
            step=_step_from_dict(data),
            created_at=created_at or datetime.now(timezone.utc),
            updated_at=updated_at or datetime.now(timezone.utc),
        )


def _step_from_dict(data: dict[str, Any]) -> Step:
    label = data.get("step") or StepLabel.WELCOME.value
    year = data.get("year")
    year = int(year) if year is not None else None

    if label == StepLabel.WELCOME.value:
        return AwaitingMaker()
    if label == StepLabel.MAKER.value:
        return AwaitingMaker(returning=True)
    if label == StepLabel.YEAR.value:
        return AwaitingYear(maker=data["maker"])
    if label == StepLabel.MODEL_SELECTION.value:
        return SelectingModel(
            maker=data["maker"],
            year=year,
            cars=tuple(Vehicle.from_dict(car) for car in data["cars"]),
        )
    if label == StepLabel.REGION.value:
        return AwaitingRegion(
            maker=data["maker"],
            year=year,
            selected_car_id=data["selected_car_id"],
        )
    if label == StepLabel.RESIDENT_CHECK.value:
        return AwaitingResidency(
            maker=data["maker"],
            year=year,
            selected_car_id=data["selected_car_id"],
            region=data["region"],
        )
    return UnrecognizedStep(raw_label=str(label))
