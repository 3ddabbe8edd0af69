"""User profile and diet log models."""

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from know_your_bite.domain.products import ProductRecord

GUEST_USER_ID = "guest"


class DailyGoals(BaseModel):
    """Daily nutrition targets."""

    model_config = ConfigDict(frozen=True)

    calories: float
    protein: float
    carbs: float
    fats: float
    sugar: float | None = None
    fiber: float | None = None
    salt: float | None = None


class UserStats(BaseModel):
    """Body metrics used to generate personalized goals."""

    model_config = ConfigDict(frozen=True)

    age: int = Field(gt=0)
    gender: Literal["male", "female", "other"]
    weight: float = Field(gt=0, description="kg")
    height: float = Field(gt=0, description="cm")
    activity_level: Literal[
        "sedentary", "light", "moderate", "active", "very_active"
    ] = "moderate"
    goal: Literal["lose_weight", "maintain", "gain_muscle"] = "maintain"


class DietLogEntry(BaseModel):
    """A logged product with a quantity multiplier of its 100 g base."""

    model_config = ConfigDict(frozen=True)

    product: ProductRecord
    quantity: float = Field(default=1.0, gt=0)
    unit: str | None = None
    added_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))


class UserIdentity(BaseModel):
    """Identity returned by an auth provider."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str


class UserProfile(BaseModel):
    """Profile with goals, viewed products and the diet log."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str
    daily_goals: DailyGoals
    history: list[ProductRecord] = Field(default_factory=list)
    diet_plan: list[DietLogEntry] = Field(default_factory=list)
    stats: UserStats | None = None

    @property
    def is_guest(self) -> bool:
        """Return True for the ephemeral guest profile."""
        return self.id == GUEST_USER_ID


DEFAULT_GOALS = DailyGoals(calories=2200, protein=150, carbs=250, fats=70)


def guest_profile() -> UserProfile:
    """Return a fresh guest profile with default goals."""
    return UserProfile(
        id=GUEST_USER_ID,
        name="Guest User",
        email="guest@example.com",
        daily_goals=DEFAULT_GOALS,
    )


def new_profile(identity: UserIdentity) -> UserProfile:
    """Return an empty profile for a newly registered identity."""
    return UserProfile(
        id=identity.id,
        name=identity.name,
        email=identity.email,
        daily_goals=DEFAULT_GOALS,
    )
