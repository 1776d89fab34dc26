"""Pydantic domain models for TabSplit."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .amounts import ZERO, parse_amount

# ============================================================================
# Friend
# ============================================================================


class Friend(BaseModel):
    """One participant in a tab, including the user themselves."""

    model_config = ConfigDict(validate_assignment=True)

    id: UUID = Field(default_factory=uuid4, frozen=True)
    name: str
    contact_info: str | None = None  # email/phone, reminder display only
    paid_amount: Decimal = ZERO
    owes_amount: Decimal = ZERO  # written by the split calculator
    is_you: bool = False
    custom_tip: Decimal = ZERO  # custom split only

    @field_validator("paid_amount", "owes_amount", "custom_tip", mode="before")
    @classmethod
    def _coerce_amount(cls, value):
        # Stored owed amounts may legitimately exceed the input ceiling
        return parse_amount(value, limit=None)

    @property
    def display_name(self) -> str:
        return "You" if self.is_you else self.name


# ============================================================================
# Visual identifier (photo or icon, never both)
# ============================================================================


class ImageVisual(BaseModel):
    """Raw image bytes handed over by the host's image picker."""

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    kind: Literal["image"] = "image"
    data: bytes


class IconVisual(BaseModel):
    """A named icon from the host's icon set."""

    kind: Literal["icon"] = "icon"
    name: str


Visual = Annotated[ImageVisual | IconVisual, Field(discriminator="kind")]


class Coordinate(BaseModel):
    """Location supplied by the host's location provider."""

    latitude: float
    longitude: float


# ============================================================================
# Tab
# ============================================================================


class Tab(BaseModel):
    """One recorded group outing and how its bill was split.

    total_amount is set at creation and kept equal to the sum of the
    friends' owes_amount by recalc_total(), which the store calls on every
    update. Mutations outside the store do not recompute it.
    """

    id: UUID = Field(default_factory=uuid4, frozen=True)
    restaurant_name: str
    date: datetime = Field(default_factory=datetime.now)
    total_amount: Decimal = ZERO
    friends: list[Friend]
    visual: Visual | None = None
    coordinate: Coordinate | None = None
    is_settled: bool = False
    reminded_friend_ids: set[UUID] = Field(default_factory=set)

    @field_validator("friends")
    @classmethod
    def _unique_friend_ids(cls, friends: list[Friend]) -> list[Friend]:
        seen: set[UUID] = set()
        for friend in friends:
            if friend.id in seen:
                raise ValueError(f"Duplicate friend id {friend.id}")
            seen.add(friend.id)
        return friends

    def get_friend(self, friend_id: UUID) -> Friend | None:
        """Get a friend in this tab by id."""
        for friend in self.friends:
            if friend.id == friend_id:
                return friend
        return None

    def mark_reminded(self, friend_id: UUID):
        self.reminded_friend_ids.add(friend_id)

    def has_reminded(self, friend_id: UUID) -> bool:
        return friend_id in self.reminded_friend_ids

    def recalc_total(self):
        """Set total_amount to the sum of what every friend owes."""
        self.total_amount = sum((f.owes_amount for f in self.friends), ZERO)
