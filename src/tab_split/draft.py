"""In-progress state for the outing creation flow.

One draft is shared by every creation step (location/date/photo, friends,
payment) and reset when the tab is saved or the flow is cancelled.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from .amounts import parse_amount
from .models import Coordinate, Friend, IconVisual, ImageVisual, Tab, Visual


def _self_friend() -> Friend:
    return Friend(name="You", is_you=True)


class OutingDraft:
    """Transient accumulator for a new outing. No persistence, no validation."""

    def __init__(self, default_restaurant_name: str = "Group Outing"):
        self.default_restaurant_name = default_restaurant_name
        self.location_name: str = ""
        self.outing_date: datetime = datetime.now()
        self.visual: Visual | None = None
        self.coordinate: Coordinate | None = None
        self.friends: list[Friend] = [_self_friend()]

    def reset(self):
        """Restore defaults before a new flow or after a save."""
        self.location_name = ""
        self.outing_date = datetime.now()
        self.visual = None
        self.coordinate = None
        self.friends = [_self_friend()]

    # ========================================================================
    # Photo / icon
    # ========================================================================

    def select_image(self, data: bytes):
        self.visual = ImageVisual(data=data)

    def select_icon(self, name: str):
        self.visual = IconVisual(name=name)

    def clear_visual(self):
        self.visual = None

    # ========================================================================
    # Friends
    # ========================================================================

    def add_friend(self, name: str, contact_info: str | None = None) -> Friend | None:
        """Add a friend by name; blank names are ignored."""
        trimmed = name.strip()
        if not trimmed:
            return None

        friend = Friend(name=trimmed, contact_info=(contact_info or "").strip() or None)
        self.friends.append(friend)
        return friend

    def remove_friend(self, friend_id: UUID) -> bool:
        before = len(self.friends)
        self.friends = [f for f in self.friends if f.id != friend_id]
        return len(self.friends) != before

    def set_friend_amounts(
        self,
        friend_id: UUID,
        paid: str | Decimal | float | None = None,
        tip: str | Decimal | float | None = None,
    ) -> bool:
        """Record what a friend paid and tipped (custom split entry)."""
        for index, friend in enumerate(self.friends):
            if friend.id != friend_id:
                continue
            update = {}
            if paid is not None:
                update["paid_amount"] = parse_amount(paid)
            if tip is not None:
                update["custom_tip"] = parse_amount(tip)
            self.friends[index] = friend.model_copy(update=update)
            return True
        return False

    # ========================================================================
    # Building the tab
    # ========================================================================

    @property
    def restaurant_name(self) -> str:
        return self.location_name.strip() or self.default_restaurant_name

    def build_tab(self, total: Decimal, friends: list[Friend] | None = None) -> Tab:
        """Create a tab from the current draft."""
        return Tab(
            restaurant_name=self.restaurant_name,
            date=self.outing_date,
            total_amount=total,
            friends=friends if friends is not None else self.friends,
            visual=self.visual,
            coordinate=self.coordinate,
        )
