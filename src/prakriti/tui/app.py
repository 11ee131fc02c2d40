"""Textual handbook browser for Prakriti Mitra."""

from typing import Optional

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widgets import Footer, Header, Label, ListItem, ListView, Markdown

from prakriti.config import PrakritiConfig
from prakriti.handbook import ContentRepository, HandbookStore, ViewProjection
from prakriti.models import Category, Handbook, Item


def item_markdown(item: Optional[Item]) -> str:
    """Render an item and its sections as Markdown."""
    if item is None:
        return "_ఒక అంశాన్ని ఎంచుకోండి (select an item)_"
    lines = [f"# {item.name}", ""]
    if item.image:
        lines += [f"[చిత్రం / image]({item.image})", ""]
    if not item.sections:
        lines.append("_No sections yet._")
    for section in item.sections:
        lines += [f"## {section.title or '(untitled)'}", "", section.content, ""]
    return "\n".join(lines)


class CategoryListItem(ListItem):
    """A category row in the left panel."""

    def __init__(self, category: Category) -> None:
        super().__init__()
        self.category = category

    def compose(self) -> ComposeResult:
        yield Label(f"📂 {self.category.name} ({len(self.category.items)})")


class HandbookItemListItem(ListItem):
    """An item row in the middle panel."""

    def __init__(self, category_id: str, item: Item) -> None:
        super().__init__()
        self.category_id = category_id
        self.handbook_item = item

    def compose(self) -> ComposeResult:
        yield Label(f"📄 {self.handbook_item.name}")


class HandbookApp(App):
    """Browse handbook categories, items and sections."""

    TITLE = "ప్రకృతి మిత్ర"
    SUB_TITLE = "Handbook"

    CSS = """
    #main-layout {
        height: 1fr;
    }

    #categories-panel {
        width: 30;
        border-right: solid $primary;
    }

    #items-panel {
        width: 36;
        border-right: solid $primary;
    }

    .panel-title {
        text-style: bold;
        color: $accent;
        padding: 0 1;
    }

    #item-detail {
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("r", "refresh", "Refresh", show=True),
        Binding("escape", "back", "Back", show=True),
    ]

    def __init__(self, store: Optional[HandbookStore] = None):
        super().__init__()
        if store is None:
            from prakriti.cli import get_store, init_db
            init_db()
            store = get_store()
        self.store = store
        self.navigation = ViewProjection()
        self.snapshot: Handbook = ContentRepository().snapshot
        self._shown_category_id: Optional[str] = None
        self.theme = PrakritiConfig.load().theme

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="categories-panel"):
                yield Label("వర్గాలు", classes="panel-title")
                yield ListView(id="category-list")
            with Vertical(id="items-panel"):
                yield Label("అంశాలు", classes="panel-title")
                yield ListView(id="item-list")
            with VerticalScroll(id="detail-panel"):
                yield Markdown(item_markdown(None), id="item-detail")
        yield Footer()

    def on_mount(self) -> None:
        self.action_refresh()

    def load_snapshot(self) -> Handbook:
        """Read the latest snapshot from the store (seed if none saved)."""
        return ContentRepository(initial=self.store.load()).snapshot

    def action_refresh(self) -> None:
        """Reload from the store and re-validate the selection."""
        self.snapshot = self.load_snapshot()
        categories = self.query_one("#category-list", ListView)
        categories.clear()
        categories.extend(CategoryListItem(c) for c in self.snapshot.categories)
        self._shown_category_id = None
        self.show_selection()

    def action_back(self) -> None:
        self.navigation.back()
        self.show_selection()

    def show_selection(self) -> None:
        """Render the current selection against the current snapshot."""
        resolved = self.navigation.resolve(self.snapshot)
        category_id = resolved.category.id if resolved.category else None

        if category_id != self._shown_category_id:
            items = self.query_one("#item-list", ListView)
            items.clear()
            if resolved.category is not None:
                items.extend(
                    HandbookItemListItem(resolved.category.id, item)
                    for item in resolved.category.items
                )
            self._shown_category_id = category_id

        self.sub_title = resolved.category.name if resolved.category else "Handbook"
        self.query_one("#item-detail", Markdown).update(item_markdown(resolved.item))

    @on(ListView.Selected, "#category-list")
    def category_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, CategoryListItem):
            self.navigation.select_category(event.item.category.id)
            self.show_selection()

    @on(ListView.Selected, "#item-list")
    def item_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, HandbookItemListItem):
            self.navigation.select_item(event.item.category_id, event.item.handbook_item.id)
            self.show_selection()
