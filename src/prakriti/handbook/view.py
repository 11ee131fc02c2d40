"""Read-only navigation state over the handbook."""

from dataclasses import dataclass
from typing import Optional

from prakriti.models import Category, Handbook, Item


@dataclass(frozen=True)
class ResolvedView:
    """What the selection points at in a particular snapshot."""

    category: Optional[Category] = None
    item: Optional[Item] = None

    @property
    def level(self) -> str:
        if self.item is not None:
            return "item"
        if self.category is not None:
            return "category"
        return "root"


class ViewProjection:
    """Selected category and item, stored by identifier only.

    Identifiers can go stale when the repository changes underneath, so
    callers resolve against the latest snapshot on every render instead of
    caching the objects.
    """

    def __init__(
        self,
        selected_category_id: Optional[str] = None,
        selected_item_id: Optional[str] = None,
    ) -> None:
        self.selected_category_id = selected_category_id
        self.selected_item_id = selected_item_id

    def select_category(self, category_id: str) -> None:
        self.selected_category_id = category_id
        self.selected_item_id = None

    def select_item(self, category_id: str, item_id: str) -> None:
        self.selected_category_id = category_id
        self.selected_item_id = item_id

    def back(self) -> None:
        """Move up one level."""
        if self.selected_item_id is not None:
            self.selected_item_id = None
        else:
            self.selected_category_id = None

    def clear(self) -> None:
        self.selected_category_id = None
        self.selected_item_id = None

    def resolve(self, handbook: Handbook) -> ResolvedView:
        """Resolve the selection, falling back to the parent for stale ids."""
        if self.selected_category_id is None:
            self.selected_item_id = None
            return ResolvedView()

        category = handbook.get_category(self.selected_category_id)
        if category is None:
            self.clear()
            return ResolvedView()

        if self.selected_item_id is None:
            return ResolvedView(category=category)

        item = category.get_item(self.selected_item_id)
        if item is None:
            self.selected_item_id = None
            return ResolvedView(category=category)
        return ResolvedView(category=category, item=item)
