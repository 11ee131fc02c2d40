"""Tests for Prakriti Mitra TUI application."""

import pytest
from click.testing import CliRunner
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

import prakriti.cli as cli_module
from prakriti.cli import cli
from prakriti.handbook import ContentRepository, HandbookStore


@pytest.fixture
def store():
    """Create a store backed by an in-memory database."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    store = HandbookStore(engine)
    store.init()
    yield store
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


class TestDashboardCommand:
    """Tests for the dashboard command."""

    def test_dashboard_help_shows_shortcuts(self, store: HandbookStore, monkeypatch) -> None:
        """Test that help shows keyboard shortcuts."""
        monkeypatch.setattr(cli_module, "engine", store.engine)
        runner = CliRunner()
        result = runner.invoke(cli, ["dashboard", "--help"])
        assert result.exit_code == 0
        assert "Keyboard shortcuts" in result.output
        assert "Refresh" in result.output


class TestTUIModule:
    """Tests for TUI module imports."""

    def test_app_bindings(self) -> None:
        """Test HandbookApp has expected key bindings."""
        from prakriti.tui import HandbookApp
        binding_keys = [b.key for b in HandbookApp.BINDINGS]
        assert "q" in binding_keys  # Quit
        assert "r" in binding_keys  # Refresh
        assert "escape" in binding_keys  # Back


class TestItemMarkdown:
    """Tests for item rendering."""

    def test_no_item(self) -> None:
        from prakriti.tui.app import item_markdown
        assert "select an item" in item_markdown(None)

    def test_item_with_sections(self) -> None:
        from prakriti.tui.app import item_markdown
        item = ContentRepository().get_item("2", "jeevamrutham")
        text = item_markdown(item)
        assert text.startswith("# జీవామృతం")
        assert "## తయారీ విధానం" in text
        assert item.image in text

    def test_item_without_sections(self) -> None:
        from prakriti.tui.app import item_markdown
        snapshot = ContentRepository().add_item("3", "New")
        assert "No sections yet" in item_markdown(snapshot.get_category("3").items[-1])


class TestHandbookApp:
    """Tests for the running handbook browser."""

    @pytest.mark.asyncio
    async def test_loads_seed_when_store_empty(self, store: HandbookStore) -> None:
        from prakriti.tui import HandbookApp

        app = HandbookApp(store=store)
        async with app.run_test(size=(120, 40)) as pilot:
            await pilot.pause()
            assert len(app.query_one("#category-list").children) == 3

    @pytest.mark.asyncio
    async def test_refresh_falls_back_when_item_deleted(self, store: HandbookStore) -> None:
        """A selected item deleted elsewhere falls back to its category."""
        from prakriti.tui import HandbookApp

        app = HandbookApp(store=store)
        async with app.run_test(size=(120, 40)) as pilot:
            await pilot.pause()
            app.navigation.select_item("2", "beejamrutham")
            app.show_selection()
            await pilot.pause()
            assert app.sub_title == "కషాయాలు"
            assert len(app.query_one("#item-list").children) == 3

            repository = ContentRepository()
            repository.delete_item("2", "beejamrutham")
            store.save(repository.snapshot)

            await pilot.press("r")
            await pilot.pause()
            assert app.navigation.selected_category_id == "2"
            assert app.navigation.selected_item_id is None
            assert len(app.query_one("#item-list").children) == 2

    @pytest.mark.asyncio
    async def test_back_returns_to_root(self, store: HandbookStore) -> None:
        from prakriti.tui import HandbookApp

        app = HandbookApp(store=store)
        async with app.run_test(size=(120, 40)) as pilot:
            await pilot.pause()
            app.navigation.select_item("1", "rice")
            app.show_selection()
            await pilot.press("escape")
            await pilot.press("escape")
            await pilot.pause()
            assert app.navigation.selected_category_id is None
            assert app.sub_title == "Handbook"
