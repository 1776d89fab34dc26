"""Service layer that composes the draft, split calculator and tab store.

The host UI calls into TabService for every user action: it accumulates the
outing in the draft, computes the split, commits the tab to the store and
drives delayed transitions through the deferred-action queue.
"""

import logging
from collections.abc import Iterable
from decimal import Decimal
from uuid import UUID

from .amounts import ZERO, parse_amount
from .calculator import (
    apply_custom_split,
    custom_total,
    split_equally,
    total_with_tax_and_tip,
)
from .config import Settings
from .draft import OutingDraft
from .models import Friend, Tab
from .scheduler import DeferredActions
from .store import SqliteBlobStore, TabStore

logger = logging.getLogger(__name__)

AmountInput = str | Decimal | float | None

# Deferred-action key for dismissing the notice, shared by every tab
NOTICE_SLOT = UUID(int=0)


class TabService:
    """Service for creating, editing and settling tabs."""

    def __init__(
        self,
        settings: Settings,
        store: TabStore,
        scheduler: DeferredActions | None = None,
    ):
        """Initialize the tab service."""
        self.settings = settings
        self.store = store
        self.scheduler = scheduler or DeferredActions()
        self.draft = OutingDraft(settings.default_restaurant_name)
        self.notice: str | None = None

    # ========================================================================
    # Creation flow
    # ========================================================================

    def start_outing(self) -> OutingDraft:
        """Begin a new creation flow with a clean draft."""
        self.draft.reset()
        return self.draft

    def save_equal_split(
        self,
        bill: AmountInput,
        tax: AmountInput = None,
        tip_percent: AmountInput = None,
        payer_id: UUID | None = None,
    ) -> Tab | None:
        """
        Split the draft's bill equally and save it as a new tab.

        Args:
            bill: Pre-tax bill amount
            tax: Tax amount (optional)
            tip_percent: Tip percentage of the bill (optional)
            payer_id: Friend who paid (owes nothing)

        Returns:
            The saved tab, or None when the total is not positive
        """
        total = total_with_tax_and_tip(bill, tax, tip_percent)
        friends = split_equally(self.draft.friends, total, payer_id)
        return self._commit_draft(total, friends)

    def save_custom_split(
        self,
        total_bill: AmountInput,
        shared_tax: AmountInput = None,
    ) -> Tab | None:
        """
        Split the draft using each friend's paid and tip amounts, then save.

        Under "net_owed" the tab total is the bill; under "subtotal" it is the
        sum of every friend's subtotal.

        Returns:
            The saved tab, or None when the total is not positive
        """
        policy = self.settings.custom_split_policy
        bill = parse_amount(total_bill)
        friends = apply_custom_split(self.draft.friends, bill, shared_tax, policy)
        total = bill if policy == "net_owed" else custom_total(friends, shared_tax)
        return self._commit_draft(total, friends)

    def _commit_draft(self, total: Decimal, friends: list[Friend]) -> Tab | None:
        if total <= 0:
            logger.info("Nothing to save, total is not positive")
            return None

        tab = self.draft.build_tab(total, friends)
        if not self.store.append(tab):
            return None
        self.draft.reset()

        logger.info(
            f"Saved tab {tab.id} with {len(tab.friends)} friends, "
            f"total: ${tab.total_amount:.2f}"
        )
        return tab

    # ========================================================================
    # Editing
    # ========================================================================

    def guess_payer(self, tab: Tab) -> Friend | None:
        """First friend who paid something, preselected when editing."""
        return next((f for f in tab.friends if f.paid_amount > 0), None)

    def resplit_equally(
        self,
        tab_id: UUID,
        bill: AmountInput,
        tax: AmountInput = None,
        tip_percent: AmountInput = None,
        payer_id: UUID | None = None,
    ) -> Tab | None:
        """Re-split an existing tab equally; the store recomputes its total."""
        tab = self.store.get(tab_id)
        if tab is None:
            return None

        total = total_with_tax_and_tip(bill, tax, tip_percent)
        friends = split_equally(tab.friends, total, payer_id)
        return self._commit_edit(tab, friends)

    def resplit_custom(
        self,
        tab_id: UUID,
        friends: list[Friend],
        total_bill: AmountInput,
        shared_tax: AmountInput = None,
    ) -> Tab | None:
        """Re-split an existing tab from edited paid/tip amounts."""
        tab = self.store.get(tab_id)
        if tab is None:
            return None

        resplit = apply_custom_split(
            friends,
            parse_amount(total_bill),
            shared_tax,
            self.settings.custom_split_policy,
        )
        return self._commit_edit(tab, resplit)

    def _commit_edit(self, tab: Tab, friends: list[Friend]) -> Tab | None:
        edited = tab.model_copy(update={"friends": friends})
        if not self.store.update(edited):
            return None
        self._show_notice("Changes saved")
        return self.store.get(tab.id)

    # ========================================================================
    # Reminders and settlement
    # ========================================================================

    def reminder_candidates(self, tab: Tab) -> list[Friend]:
        """Friends other than you who still owe something."""
        return [f for f in tab.friends if not f.is_you and f.owes_amount > 0]

    def remind(self, tab_id: UUID, friend_id: UUID) -> bool:
        """Mark a friend reminded if they are eligible for a reminder."""
        tab = self.store.get(tab_id)
        if tab is None:
            return False

        if all(f.id != friend_id for f in self.reminder_candidates(tab)):
            logger.debug(f"Friend {friend_id} is not eligible for a reminder")
            return False

        return self.store.mark_reminded(tab_id, friend_id)

    def request_settle(self, tab_id: UUID) -> bool:
        """Settle a tab once the confirmation animation has played."""
        if tab_id not in self.store:
            return False

        self.scheduler.schedule(
            tab_id,
            self.settings.settle_delay_seconds,
            lambda: self.store.mark_settled(tab_id),
            name="settle",
        )
        return True

    def reactivate(self, tab_id: UUID) -> bool:
        """Move a settled tab back to active."""
        self.scheduler.cancel(tab_id, "settle")
        return self.store.mark_active(tab_id)

    def delete_tab(self, tab_id: UUID) -> bool:
        """Delete a tab and anything still queued for it."""
        cancelled = self.scheduler.cancel(tab_id)
        if cancelled:
            logger.debug(f"Cancelled {cancelled} deferred actions for tab {tab_id}")
        return self.store.delete(tab_id)

    def tick(self) -> int:
        """Run deferred actions that are due."""
        return self.scheduler.run_due()

    def _show_notice(self, message: str):
        self.notice = message
        self.scheduler.schedule(
            NOTICE_SLOT,
            self.settings.toast_seconds,
            self._clear_notice,
            name="toast",
        )

    def _clear_notice(self):
        self.notice = None

    # ========================================================================
    # Listing
    # ========================================================================

    def active_tabs(self) -> list[Tab]:
        return [tab for tab in self.store if not tab.is_settled]

    def settled_tabs(self) -> list[Tab]:
        return [tab for tab in self.store if tab.is_settled]

    def outstanding_total(self, tab: Tab) -> Decimal:
        """What everyone except you still owes on a tab."""
        return sum((f.owes_amount for f in tab.friends if not f.is_you), ZERO)


def open_service(settings: Settings) -> TabService:
    """Create a service backed by the SQLite blob store in settings."""
    blob_store = SqliteBlobStore(settings.database_path)
    return TabService(settings, TabStore(blob_store, key=settings.storage_key))


def group_by_month(tabs: Iterable[Tab]) -> dict[str, list[Tab]]:
    """
    Group tabs into "Month YYYY" folders, newest month first.

    Tabs keep their original order within a month.
    """
    groups: dict[tuple[int, int], list[Tab]] = {}
    for tab in tabs:
        groups.setdefault((tab.date.year, tab.date.month), []).append(tab)

    return {
        folder[0].date.strftime("%B %Y"): folder
        for _, folder in sorted(groups.items(), key=lambda item: item[0], reverse=True)
    }
