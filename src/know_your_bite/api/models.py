"""Request and response models for the HTTP API."""

from pydantic import BaseModel, Field

from know_your_bite.domain.products import ProductRecord
from know_your_bite.domain.profiles import (
    DailyGoals,
    DietLogEntry,
    UserProfile,
    UserStats,
)
from know_your_bite.services.preferences import Theme


class SearchRequest(BaseModel):
    """Text product search."""

    query: str


class ScanRequest(BaseModel):
    """Photo scan with base64 image data, optionally as a data URL."""

    image_base64: str


class SignUpRequest(BaseModel):
    """New account registration."""

    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=6)


class SignInRequest(BaseModel):
    """Credentials for sign-in."""

    email: str
    password: str


class LogEntryRequest(BaseModel):
    """Product to append to the diet log."""

    product: ProductRecord
    quantity: float = Field(default=1.0, gt=0)
    unit: str | None = None


class MealRequest(BaseModel):
    """Free-text meal description."""

    description: str = Field(min_length=1)


class GenerateGoalsRequest(BaseModel):
    """Body metrics for goal generation."""

    stats: UserStats


class ThemeRequest(BaseModel):
    """Theme selection."""

    theme: Theme


class ProfileResponse(BaseModel):
    """Active profile with its session state."""

    state: str
    profile: UserProfile


class DietResponse(BaseModel):
    """Diet log with totals and goal progress."""

    entries: list[DietLogEntry]
    goals: DailyGoals
    totals: dict[str, float]
    calorie_percentage: float
    remaining: dict[str, float]
