"""SQLModel tables holding a handbook snapshot between processes.

The store writes whole snapshots: ``save`` clears the tables and writes
every row again. Row order is kept with an explicit ``position`` column.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.engine import Engine
from sqlmodel import Field, Session, SQLModel, select

from prakriti.models import Category, Handbook, Item, Screen, Section


logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Get current UTC time."""
    return datetime.now(timezone.utc)


class HandbookMeta(SQLModel, table=True):
    """Marks that a snapshot was saved, even one with no categories."""

    __tablename__ = "handbook_meta"

    id: int = Field(default=1, primary_key=True)
    saved_at: datetime = Field(default_factory=utcnow)


class CategoryRow(SQLModel, table=True):
    """Stored handbook category."""

    __tablename__ = "handbook_category"

    id: str = Field(primary_key=True)
    name: str
    position: int = Field(default=0, index=True)


class ItemRow(SQLModel, table=True):
    """Stored handbook item."""

    __tablename__ = "handbook_item"

    id: str = Field(primary_key=True)
    category_id: str = Field(foreign_key="handbook_category.id", index=True)
    name: str
    screen: str = Field(default=Screen.HANDBOOK.value)
    image: Optional[str] = None
    position: int = Field(default=0)


class SectionRow(SQLModel, table=True):
    """Stored item section; ids are only unique within their item."""

    __tablename__ = "handbook_section"

    item_id: str = Field(foreign_key="handbook_item.id", primary_key=True)
    id: str = Field(primary_key=True)
    title: str = ""
    content: str = ""
    position: int = Field(default=0)


class HandbookStore:
    """Load and save handbook snapshots through a SQLAlchemy engine."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def init(self) -> None:
        """Create the handbook tables if they do not exist."""
        SQLModel.metadata.create_all(self.engine)

    def load(self) -> Optional[Handbook]:
        """Return the stored snapshot, or None if nothing was ever saved."""
        with Session(self.engine) as session:
            if session.get(HandbookMeta, 1) is None:
                return None
            category_rows = session.exec(
                select(CategoryRow).order_by(CategoryRow.position)
            ).all()
            item_rows = session.exec(select(ItemRow).order_by(ItemRow.position)).all()
            section_rows = session.exec(
                select(SectionRow).order_by(SectionRow.position)
            ).all()

        sections_by_item: dict[str, list[Section]] = {}
        for row in section_rows:
            sections_by_item.setdefault(row.item_id, []).append(
                Section(id=row.id, title=row.title, content=row.content)
            )

        items_by_category: dict[str, list[Item]] = {}
        for row in item_rows:
            items_by_category.setdefault(row.category_id, []).append(
                Item(
                    id=row.id,
                    name=row.name,
                    screen=Screen(row.screen),
                    image=row.image,
                    sections=tuple(sections_by_item.get(row.id, [])),
                )
            )

        return Handbook(
            categories=tuple(
                Category(
                    id=row.id,
                    name=row.name,
                    items=tuple(items_by_category.get(row.id, [])),
                )
                for row in category_rows
            )
        )

    def save(self, handbook: Handbook) -> None:
        """Replace the stored snapshot with ``handbook``."""
        with Session(self.engine) as session:
            session.exec(delete(SectionRow))
            session.exec(delete(ItemRow))
            session.exec(delete(CategoryRow))
            session.merge(HandbookMeta(id=1, saved_at=utcnow()))

            for c_pos, category in enumerate(handbook.categories):
                session.add(CategoryRow(id=category.id, name=category.name, position=c_pos))
                for i_pos, item in enumerate(category.items):
                    session.add(
                        ItemRow(
                            id=item.id,
                            category_id=category.id,
                            name=item.name,
                            screen=item.screen.value,
                            image=item.image,
                            position=i_pos,
                        )
                    )
                    for s_pos, section in enumerate(item.sections):
                        session.add(
                            SectionRow(
                                item_id=item.id,
                                id=section.id,
                                title=section.title,
                                content=section.content,
                                position=s_pos,
                            )
                        )
            session.commit()
        logger.info(
            "Saved handbook: %d categories, %d items",
            len(handbook.categories),
            handbook.item_count,
        )

    def clear(self) -> None:
        """Remove any stored snapshot."""
        with Session(self.engine) as session:
            session.exec(delete(SectionRow))
            session.exec(delete(ItemRow))
            session.exec(delete(CategoryRow))
            session.exec(delete(HandbookMeta))
            session.commit()
