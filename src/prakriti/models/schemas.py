"""Pydantic schemas for Prakriti Mitra handbook and reference data."""

from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict


def _duplicates(ids: Iterable[str]) -> list[str]:
    seen = set()
    repeated = []
    for identifier in ids:
        if identifier in seen and identifier not in repeated:
            repeated.append(identifier)
        seen.add(identifier)
    return repeated


class Screen(str, Enum):
    """Navigation targets a handbook item can point at."""

    HOME = "home"
    CROPS = "crops"
    INPUTS = "inputs"
    CHAT = "chat"
    FAQS = "faqs"
    HANDBOOK = "handbook"


class ChatRole(str, Enum):
    """Speaker of a chat turn."""

    USER = "user"
    MODEL = "model"


class Section(BaseModel):
    """A titled block of free text inside a handbook item."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    content: str = ""


class Item(BaseModel):
    """A handbook entry owned by exactly one category."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    screen: Screen = Screen.HANDBOOK
    image: Optional[str] = None
    sections: tuple[Section, ...] = ()

    def get_section(self, section_id: str) -> Optional[Section]:
        """Find a section by id."""
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def duplicate_section_ids(self) -> list[str]:
        """Section ids that occur more than once in this item."""
        return _duplicates(section.id for section in self.sections)


class Category(BaseModel):
    """Top-level grouping of handbook items."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    items: tuple[Item, ...] = ()

    def get_item(self, item_id: str) -> Optional[Item]:
        """Find an item of this category by id."""
        for item in self.items:
            if item.id == item_id:
                return item
        return None


class Handbook(BaseModel):
    """Snapshot of the whole category -> item -> section hierarchy."""

    model_config = ConfigDict(frozen=True)

    categories: tuple[Category, ...] = ()

    def get_category(self, category_id: str) -> Optional[Category]:
        """Find a category by id."""
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def get_item(self, category_id: str, item_id: str) -> Optional[Item]:
        """Find an item inside a specific category."""
        category = self.get_category(category_id)
        if category is None:
            return None
        return category.get_item(item_id)

    def find_item(self, item_id: str) -> Optional[tuple[Category, Item]]:
        """Locate an item anywhere in the hierarchy, with its owning category."""
        for category in self.categories:
            item = category.get_item(item_id)
            if item is not None:
                return category, item
        return None

    def all_ids(self) -> list[str]:
        """Every category, item and section identifier in the snapshot."""
        ids = []
        for category in self.categories:
            ids.append(category.id)
            for item in category.items:
                ids.append(item.id)
                ids.extend(section.id for section in item.sections)
        return ids

    @property
    def item_count(self) -> int:
        return sum(len(c.items) for c in self.categories)

    def duplicate_id_errors(self) -> list[str]:
        """Describe every identifier that breaks the strict tree."""
        errors = [
            f"Duplicate category id '{category_id}'"
            for category_id in _duplicates(c.id for c in self.categories)
        ]
        errors += [
            f"Duplicate item id '{item_id}'"
            for item_id in _duplicates(i.id for c in self.categories for i in c.items)
        ]
        for category in self.categories:
            for item in category.items:
                errors += [
                    f"Duplicate section id '{section_id}' in item '{item.id}'"
                    for section_id in item.duplicate_section_ids()
                ]
        return errors


class Crop(BaseModel):
    """Static crop reference record."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    localized_name: str
    description: str
    sowing_time: str
    pest_management: tuple[str, ...] = ()


class NaturalInput(BaseModel):
    """Static natural-input (kashayam) reference record."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    localized_name: str
    ingredients: tuple[str, ...] = ()
    preparation: str
    usage: str


class FAQ(BaseModel):
    """A frequently asked question with its answer."""

    model_config = ConfigDict(frozen=True)

    question: str
    answer: str


class ChatTurn(BaseModel):
    """One turn of a chat conversation."""

    model_config = ConfigDict(frozen=True)

    role: ChatRole
    text: str
