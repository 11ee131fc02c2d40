"""Canonical in-memory handbook hierarchy.

The repository owns one ``Handbook`` snapshot at a time. Every mutation
builds a new snapshot (models are frozen, untouched branches are shared)
and swaps it in only after all checks pass, so a failed call leaves the
previous snapshot in place.
"""

import logging
import time
from typing import Callable, Optional

from prakriti.data import SEED_HANDBOOK, placeholder_image
from prakriti.errors import NotFoundError, ValidationError
from prakriti.models import Category, Handbook, Item, Screen


logger = logging.getLogger(__name__)


class IdGenerator:
    """Strictly increasing millisecond-timestamp identifiers.

    Two calls inside the same millisecond get consecutive values instead of
    colliding. ``reserve`` raises the floor past identifiers that already
    exist so a loaded snapshot never sees its ids handed out again.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.time
        self._last = 0

    def __call__(self) -> str:
        now = int(self._clock() * 1000)
        self._last = max(now, self._last + 1)
        return str(self._last)

    def reserve(self, identifiers) -> None:
        """Make sure future ids are greater than any numeric id given."""
        for identifier in identifiers:
            if identifier.isdecimal():
                self._last = max(self._last, int(identifier))


def _require_name(value: str, what: str) -> str:
    name = (value or "").strip()
    if not name:
        raise ValidationError(f"{what} name must not be empty")
    return name


class ContentRepository:
    """Owns the handbook snapshot and the operations that change it."""

    def __init__(
        self,
        initial: Optional[Handbook] = None,
        seed: Handbook = SEED_HANDBOOK,
        id_factory: Optional[IdGenerator] = None,
    ) -> None:
        self._seed = seed
        self._ids = id_factory or IdGenerator()
        self._snapshot = seed
        self._ids.reserve(seed.all_ids())
        if initial is not None:
            self.load(initial)

    @property
    def snapshot(self) -> Handbook:
        """The current hierarchy."""
        return self._snapshot

    def new_id(self) -> str:
        """Hand out a fresh, never-reused identifier."""
        return self._ids()

    def load(self, handbook: Handbook) -> Handbook:
        """Replace the current state with a stored or imported snapshot."""
        errors = handbook.duplicate_id_errors()
        if errors:
            logger.warning("Rejected handbook snapshot: %s", "; ".join(errors))
            raise ValidationError(errors[0])
        self._ids.reserve(handbook.all_ids())
        self._snapshot = handbook
        logger.info("Loaded handbook with %d categories", len(handbook.categories))
        return self._snapshot

    def _commit(self, categories) -> Handbook:
        self._snapshot = self._snapshot.model_copy(update={"categories": tuple(categories)})
        return self._snapshot

    def _index_of(self, category_id: str) -> int:
        for index, category in enumerate(self._snapshot.categories):
            if category.id == category_id:
                return index
        logger.warning("Category not found: %s", category_id)
        raise NotFoundError(f"Category '{category_id}' not found")

    def get_category(self, category_id: str) -> Category:
        """Return a category or raise ``NotFoundError``."""
        return self._snapshot.categories[self._index_of(category_id)]

    def get_item(self, category_id: str, item_id: str) -> Item:
        """Return an item of a category or raise ``NotFoundError``."""
        item = self.get_category(category_id).get_item(item_id)
        if item is None:
            logger.warning("Item not found: %s/%s", category_id, item_id)
            raise NotFoundError(f"Item '{item_id}' not found in category '{category_id}'")
        return item

    def _replace_category(self, index: int, category: Category) -> Handbook:
        categories = list(self._snapshot.categories)
        categories[index] = category
        return self._commit(categories)

    # Categories

    def add_category(self, name: str) -> Handbook:
        """Append a new, empty category."""
        name = _require_name(name, "Category")
        category = Category(id=self.new_id(), name=name, items=())
        logger.info("Adding category %s (%s)", category.id, name)
        return self._commit(self._snapshot.categories + (category,))

    def rename_category(self, category_id: str, new_name: str) -> Handbook:
        """Rename a category in place, keeping its id, position and items."""
        index = self._index_of(category_id)
        name = _require_name(new_name, "Category")
        category = self._snapshot.categories[index]
        logger.info("Renaming category %s to %s", category_id, name)
        return self._replace_category(index, category.model_copy(update={"name": name}))

    def delete_category(self, category_id: str) -> Handbook:
        """Remove a category together with all its items and sections."""
        index = self._index_of(category_id)
        categories = list(self._snapshot.categories)
        removed = categories.pop(index)
        logger.info("Deleting category %s with %d items", category_id, len(removed.items))
        return self._commit(categories)

    # Items

    def add_item(self, category_id: str, name: str) -> Handbook:
        """Append a new item with no sections and a placeholder image."""
        index = self._index_of(category_id)
        name = _require_name(name, "Item")
        item_id = self.new_id()
        item = Item(
            id=item_id,
            name=name,
            screen=Screen.HANDBOOK,
            image=placeholder_image(item_id),
            sections=(),
        )
        category = self._snapshot.categories[index]
        logger.info("Adding item %s (%s) to category %s", item_id, name, category_id)
        return self._replace_category(
            index, category.model_copy(update={"items": category.items + (item,)})
        )

    def update_item(self, category_id: str, updated_item: Item) -> Handbook:
        """Replace an item wholesale, keeping its position in the category."""
        index = self._index_of(category_id)
        category = self._snapshot.categories[index]
        items = list(category.items)
        for position, item in enumerate(items):
            if item.id == updated_item.id:
                break
        else:
            logger.warning("Item not found: %s/%s", category_id, updated_item.id)
            raise NotFoundError(
                f"Item '{updated_item.id}' not found in category '{category_id}'"
            )
        name = _require_name(updated_item.name, "Item")
        duplicates = updated_item.duplicate_section_ids()
        if duplicates:
            raise ValidationError(f"Duplicate section id '{duplicates[0]}'")
        items[position] = updated_item.model_copy(update={"name": name}, deep=True)
        logger.info("Updating item %s in category %s", updated_item.id, category_id)
        return self._replace_category(index, category.model_copy(update={"items": tuple(items)}))

    def delete_item(self, category_id: str, item_id: str) -> Handbook:
        """Remove a single item from a category."""
        index = self._index_of(category_id)
        category = self._snapshot.categories[index]
        if category.get_item(item_id) is None:
            logger.warning("Item not found: %s/%s", category_id, item_id)
            raise NotFoundError(f"Item '{item_id}' not found in category '{category_id}'")
        items = tuple(item for item in category.items if item.id != item_id)
        logger.info("Deleting item %s from category %s", item_id, category_id)
        return self._replace_category(index, category.model_copy(update={"items": items}))

    def reset(self) -> Handbook:
        """Restore the seed hierarchy, discarding everything else."""
        logger.info("Resetting handbook to seed data")
        self._snapshot = self._seed
        return self._snapshot
