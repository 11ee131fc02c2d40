"""Editing sessions for handbook items and category names.

A session holds at most one draft. Drafts are private copies: nothing the
admin does to a draft reaches the repository until ``save`` succeeds, and
``cancel`` simply drops the copy.
"""

import logging
from enum import Enum
from typing import Optional

from prakriti.errors import EditingStateError, NotFoundError, ValidationError
from prakriti.handbook.repository import ContentRepository
from prakriti.models import Category, Handbook, Item, Section


logger = logging.getLogger(__name__)

SECTION_FIELDS = ("title", "content")


class SessionState(str, Enum):
    """Which kind of draft, if any, is open."""

    BROWSING = "browsing"
    EDITING_ITEM = "editing_item"
    RENAMING_CATEGORY = "renaming_category"


class EditingSession:
    """Tracks the single item or category currently being edited."""

    def __init__(self, repository: ContentRepository) -> None:
        self.repository = repository
        self.state = SessionState.BROWSING
        self.category_id: Optional[str] = None
        self.draft_item: Optional[Item] = None
        self.draft_category: Optional[Category] = None

    @property
    def is_browsing(self) -> bool:
        return self.state is SessionState.BROWSING

    def _to_browsing(self) -> None:
        self.state = SessionState.BROWSING
        self.category_id = None
        self.draft_item = None
        self.draft_category = None

    def _require(self, state: SessionState) -> None:
        if self.state is not state:
            raise EditingStateError(
                f"Operation requires state '{state.value}', session is '{self.state.value}'"
            )

    # Lifecycle

    def begin_edit_item(self, category_id: str, item: Item) -> Item:
        """Open the stored version of an item for editing.

        Any other open draft is discarded.
        """
        current = self.repository.get_item(category_id, item.id)
        self._to_browsing()
        self.state = SessionState.EDITING_ITEM
        self.category_id = category_id
        self.draft_item = current.model_copy(deep=True)
        logger.debug("Editing item %s in category %s", item.id, category_id)
        return self.draft_item

    def begin_rename_category(self, category: Category) -> Category:
        """Open a category for renaming; any other open draft is discarded."""
        current = self.repository.get_category(category.id)
        self._to_browsing()
        self.state = SessionState.RENAMING_CATEGORY
        self.draft_category = current.model_copy(deep=True)
        logger.debug("Renaming category %s", category.id)
        return self.draft_category

    def save(self) -> Handbook:
        """Commit the draft to the repository and return to browsing.

        On failure the error propagates and the draft stays open.
        """
        if self.state is SessionState.EDITING_ITEM:
            handbook = self.repository.update_item(self.category_id, self.draft_item)
        elif self.state is SessionState.RENAMING_CATEGORY:
            handbook = self.repository.rename_category(
                self.draft_category.id, self.draft_category.name
            )
        else:
            raise EditingStateError("Nothing is open for editing")
        self._to_browsing()
        return handbook

    def cancel(self) -> None:
        """Drop the draft without touching the repository."""
        self._to_browsing()

    # Item draft

    def set_name(self, name: str) -> Item:
        self._require(SessionState.EDITING_ITEM)
        self.draft_item = self.draft_item.model_copy(update={"name": name})
        return self.draft_item

    def set_image(self, url: Optional[str]) -> Item:
        """Set or clear the draft item's image."""
        self._require(SessionState.EDITING_ITEM)
        self.draft_item = self.draft_item.model_copy(update={"image": url or None})
        return self.draft_item

    def add_section(self) -> Section:
        """Append an empty section to the draft and return it."""
        self._require(SessionState.EDITING_ITEM)
        section = Section(id=self.repository.new_id(), title="", content="")
        self.draft_item = self.draft_item.model_copy(
            update={"sections": self.draft_item.sections + (section,)}
        )
        return section

    def update_section(self, section_id: str, field: str, value: str) -> Section:
        """Change the title or content of one draft section."""
        self._require(SessionState.EDITING_ITEM)
        if field not in SECTION_FIELDS:
            raise ValidationError(f"Unknown section field '{field}'")
        sections = list(self.draft_item.sections)
        for index, section in enumerate(sections):
            if section.id == section_id:
                sections[index] = section.model_copy(update={field: value})
                self.draft_item = self.draft_item.model_copy(update={"sections": tuple(sections)})
                return sections[index]
        raise NotFoundError(f"Section '{section_id}' not found")

    def delete_section(self, section_id: str) -> Item:
        self._require(SessionState.EDITING_ITEM)
        if self.draft_item.get_section(section_id) is None:
            raise NotFoundError(f"Section '{section_id}' not found")
        self.draft_item = self.draft_item.model_copy(
            update={"sections": tuple(s for s in self.draft_item.sections if s.id != section_id)}
        )
        return self.draft_item

    # Category draft

    def set_category_name(self, name: str) -> Category:
        self._require(SessionState.RENAMING_CATEGORY)
        self.draft_category = self.draft_category.model_copy(update={"name": name})
        return self.draft_category
