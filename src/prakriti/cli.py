"""Click CLI for Prakriti Mitra."""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional

import click
from pydantic import ValidationError as SchemaValidationError
from sqlmodel import create_engine
from trogon import tui

from prakriti import __version__
from prakriti.auth import AdminSession
from prakriti.chat import ChatBridge, Conversation
from prakriti.config import PrakritiConfig
from prakriti.data import CROPS, DAILY_TIP, FAQS, NATURAL_INPUTS, get_crop, get_natural_input
from prakriti.errors import HandbookError
from prakriti.handbook import (
    ContentRepository,
    EditingSession,
    HandbookStore,
    ViewProjection,
)
from prakriti.models import Handbook


# Database setup
DATABASE_URL = PrakritiConfig.load().database_url
engine = create_engine(DATABASE_URL, echo=False)


def init_db() -> None:
    """Initialize the database."""
    get_store().init()


def get_store() -> HandbookStore:
    """Get the handbook store."""
    return HandbookStore(engine)


def load_repository() -> ContentRepository:
    """Build a repository from the stored snapshot, or the seed if none."""
    return ContentRepository(initial=get_store().load())


def fail(message: str) -> None:
    """Print an error and exit with status 1."""
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(1)


def apply_change(repository: ContentRepository, change: Callable[[], Handbook]) -> Handbook:
    """Run a handbook change and persist the new snapshot."""
    try:
        handbook = change()
    except HandbookError as e:
        fail(e.message)
    get_store().save(handbook)
    return handbook


@tui()
@click.group()
@click.version_option(version=__version__, prog_name="prakriti")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Prakriti Mitra - natural farming assistant.

    Crop and natural-input reference data, an editable handbook and an
    AI assistant that answers in Telugu.

    Quick start:
        prakriti dashboard           Launch interactive handbook browser
        prakriti tui                 Launch command explorer (Trogon)
        prakriti crops list          List crops
        prakriti handbook list       Show the handbook
        prakriti chat ask "..."      Ask the assistant
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()


@cli.command()
def dashboard() -> None:
    """Launch the interactive TUI handbook browser.

    Keyboard shortcuts:
        q      - Quit
        r      - Refresh from the database
        escape - Back
    """
    from prakriti.tui import HandbookApp
    app = HandbookApp()
    app.run()


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8000, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload")
def serve(host: str, port: int, reload: bool) -> None:
    """Start the Prakriti Mitra API server."""
    import uvicorn

    click.echo(f"Starting Prakriti Mitra API server at http://{host}:{port}")
    click.echo("Press Ctrl+C to stop")
    uvicorn.run(
        "prakriti.api.main:app",
        host=host,
        port=port,
        reload=reload,
    )


# =============================================================================
# Reference Data Commands
# =============================================================================


@cli.group()
def crops() -> None:
    """Browse crop reference data."""
    pass


@crops.command("list")
def crops_list() -> None:
    """List all crops."""
    click.echo("\n🌾 పంటల సమాచారం")
    click.echo("=" * 50)
    for crop in CROPS:
        click.echo(f"  {crop.localized_name} ({crop.name})  [{crop.id}]")
    click.echo(f"\nTotal: {len(CROPS)} crops")


@crops.command("show")
@click.argument("crop_id")
def crops_show(crop_id: str) -> None:
    """Show crop details.

    CROP_ID: Crop identifier (e.g. rice)
    """
    crop = get_crop(crop_id)
    if not crop:
        fail(f"Crop '{crop_id}' not found.")

    click.echo(f"\n{'=' * 50}")
    click.echo(f"  {crop.localized_name} ({crop.name})")
    click.echo(f"{'=' * 50}")
    click.echo(f"\n{crop.description}")
    click.echo("\nనాటు సమయం:")
    click.echo(f"  {crop.sowing_time}")
    click.echo("\nపురుగుల నివారణ:")
    for pest in crop.pest_management:
        click.echo(f"  - {pest}")
    click.echo()


@cli.group()
def inputs() -> None:
    """Browse natural-input (kashayam) recipes."""
    pass


@inputs.command("list")
def inputs_list() -> None:
    """List all natural inputs."""
    click.echo("\n💧 ప్రకృతి కషాయాలు")
    click.echo("=" * 50)
    for natural_input in NATURAL_INPUTS:
        click.echo(f"  {natural_input.localized_name} ({natural_input.name})  [{natural_input.id}]")
    click.echo(f"\nTotal: {len(NATURAL_INPUTS)} inputs")


@inputs.command("show")
@click.argument("input_id")
def inputs_show(input_id: str) -> None:
    """Show how to prepare and use a natural input.

    INPUT_ID: Input identifier (e.g. jeevamrutham)
    """
    natural_input = get_natural_input(input_id)
    if not natural_input:
        fail(f"Natural input '{input_id}' not found.")

    click.echo(f"\n{'=' * 50}")
    click.echo(f"  {natural_input.localized_name} ({natural_input.name})")
    click.echo(f"{'=' * 50}")
    click.echo("\nకావలసిన పదార్థాలు:")
    for ingredient in natural_input.ingredients:
        click.echo(f"  - {ingredient}")
    click.echo("\nతయారీ విధానం:")
    click.echo(f"  {natural_input.preparation}")
    click.echo("\nవాడుక:")
    click.echo(f"  {natural_input.usage}")
    click.echo()


@cli.command()
def faqs() -> None:
    """Show frequently asked questions."""
    click.echo("\n❓ తరచుగా అడిగే ప్రశ్నలు\n")
    for faq in FAQS:
        click.echo(f"ప్ర: {faq.question}")
        click.echo(f"జ: {faq.answer}\n")


@cli.command()
def tip() -> None:
    """Show today's farming tip."""
    click.echo(f"\n💡 నేటి సూచన\n\n{DAILY_TIP}\n")


# =============================================================================
# Chat Commands
# =============================================================================


@cli.group()
def chat() -> None:
    """Talk to the Prakriti Mitra assistant.

    Requires the GEMINI_API_KEY environment variable.
    """
    pass


@chat.command("ask")
@click.argument("message")
def chat_ask(message: str) -> None:
    """Ask a single question.

    MESSAGE: Question for the assistant
    """
    if not message.strip():
        fail("Message must not be empty.")

    async def run() -> str:
        async with ChatBridge.from_config(PrakritiConfig.load()) as bridge:
            return await bridge.send(message, [])

    click.echo(asyncio.run(run()))


@chat.command("session")
def chat_session() -> None:
    """Start an interactive conversation (empty line or 'exit' to quit)."""

    async def run() -> None:
        async with ChatBridge.from_config(PrakritiConfig.load()) as bridge:
            conversation = Conversation(bridge)
            while True:
                try:
                    message = click.prompt("మీరు", default="", show_default=False)
                except click.Abort:
                    break
                if not message.strip() or message.strip().lower() in ("exit", "quit"):
                    break
                reply = await conversation.ask(message)
                click.echo(f"\n🌿 {reply}\n")

    asyncio.run(run())


# =============================================================================
# Handbook Commands
# =============================================================================


@cli.group()
@click.option("--email", envvar="PRAKRITI_ADMIN_EMAIL", help="Admin email")
@click.option("--password", envvar="PRAKRITI_ADMIN_PASSWORD", help="Admin password")
@click.pass_context
def handbook(ctx: click.Context, email: Optional[str], password: Optional[str]) -> None:
    """Browse and edit the handbook.

    Editing commands need admin credentials, given with --email/--password
    or the PRAKRITI_ADMIN_EMAIL and PRAKRITI_ADMIN_PASSWORD environment
    variables.
    """
    admin = AdminSession()
    if email is not None and password is not None:
        admin.login(email, password)
    ctx.obj = admin


def require_admin(ctx: click.Context) -> None:
    """Exit unless the handbook group was given valid admin credentials."""
    admin = ctx.find_object(AdminSession)
    if admin is None or not admin.is_admin:
        fail("Admin credentials required (use --email/--password).")


@handbook.command("list")
@click.option("--verbose", "-v", is_flag=True, help="Show items of each category")
def handbook_list(verbose: bool) -> None:
    """List handbook categories."""
    snapshot = load_repository().snapshot

    if not snapshot.categories:
        click.echo("Handbook is empty.")
        return

    click.echo("\n📚 Handbook:")
    click.echo("=" * 50)
    for category in snapshot.categories:
        click.echo(f"\n  [{category.id}] {category.name} ({len(category.items)} items)")
        if verbose:
            for item in category.items:
                click.echo(f"    - [{item.id}] {item.name} ({len(item.sections)} sections)")

    click.echo(f"\nTotal: {len(snapshot.categories)} categories, {snapshot.item_count} items")


@handbook.command("show")
@click.argument("category_id")
@click.argument("item_id", required=False)
def handbook_show(category_id: str, item_id: Optional[str]) -> None:
    """Show a category, or one of its items with all sections.

    CATEGORY_ID: Category identifier
    ITEM_ID: Optional item identifier
    """
    view = ViewProjection()
    if item_id:
        view.select_item(category_id, item_id)
    else:
        view.select_category(category_id)
    resolved = view.resolve(load_repository().snapshot)

    if resolved.category is None:
        fail(f"Category '{category_id}' not found.")
    if item_id and resolved.item is None:
        fail(f"Item '{item_id}' not found in category '{category_id}'.")

    if resolved.level == "category":
        category = resolved.category
        click.echo(f"\n{'=' * 50}")
        click.echo(f"  [{category.id}] {category.name}")
        click.echo(f"{'=' * 50}")
        if not category.items:
            click.echo("\n  No items.")
        for item in category.items:
            click.echo(f"\n  [{item.id}] {item.name}")
            if item.image:
                click.echo(f"    Image: {item.image}")
            click.echo(f"    Sections: {len(item.sections)}")
        click.echo()
        return

    item = resolved.item
    click.echo(f"\n{'=' * 50}")
    click.echo(f"  [{item.id}] {item.name}")
    click.echo(f"{'=' * 50}")
    click.echo(f"  Category: {resolved.category.name}")
    click.echo(f"  Screen: {item.screen.value}")
    if item.image:
        click.echo(f"  Image: {item.image}")
    for section in item.sections:
        click.echo(f"\n## {section.title or '(untitled)'}  [{section.id}]")
        click.echo(section.content)
    click.echo()


@handbook.command("add-category")
@click.argument("name")
@click.pass_context
def handbook_add_category(ctx: click.Context, name: str) -> None:
    """Add a category at the end of the handbook.

    NAME: Category name
    """
    require_admin(ctx)
    repository = load_repository()
    snapshot = apply_change(repository, lambda: repository.add_category(name))
    category = snapshot.categories[-1]
    click.echo(f"✓ Added category: {category.name} [{category.id}]")


@handbook.command("rename-category")
@click.argument("category_id")
@click.argument("new_name")
@click.pass_context
def handbook_rename_category(ctx: click.Context, category_id: str, new_name: str) -> None:
    """Rename a category.

    CATEGORY_ID: Category identifier
    NEW_NAME: New name for the category
    """
    require_admin(ctx)
    repository = load_repository()
    session = EditingSession(repository)

    def rename() -> Handbook:
        session.begin_rename_category(repository.get_category(category_id))
        session.set_category_name(new_name)
        return session.save()

    apply_change(repository, rename)
    click.echo(f"✓ Renamed category [{category_id}] to '{new_name.strip()}'")


@handbook.command("delete-category")
@click.argument("category_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def handbook_delete_category(ctx: click.Context, category_id: str, yes: bool) -> None:
    """Delete a category with all of its items.

    CATEGORY_ID: Category identifier
    """
    require_admin(ctx)
    repository = load_repository()
    category = repository.snapshot.get_category(category_id)
    if category is None:
        fail(f"Category '{category_id}' not found.")

    if not yes:
        msg = f"Delete category '{category.name}'"
        if category.items:
            msg += f" and {len(category.items)} items"
        msg += "?"
        click.confirm(msg, abort=True)

    apply_change(repository, lambda: repository.delete_category(category_id))
    click.echo(f"✓ Deleted category: {category.name}")


@handbook.command("add-item")
@click.argument("category_id")
@click.argument("name")
@click.pass_context
def handbook_add_item(ctx: click.Context, category_id: str, name: str) -> None:
    """Add an empty item to a category.

    CATEGORY_ID: Category identifier
    NAME: Item name
    """
    require_admin(ctx)
    repository = load_repository()
    snapshot = apply_change(repository, lambda: repository.add_item(category_id, name))
    item = snapshot.get_category(category_id).items[-1]
    click.echo(f"✓ Added item: {item.name} [{item.id}]")


@handbook.command("edit-item")
@click.argument("category_id")
@click.argument("item_id")
@click.option("--name", help="New item name")
@click.option("--image", help="New image URL")
@click.option("--no-image", is_flag=True, help="Remove the image")
@click.option(
    "--add-section",
    nargs=2,
    multiple=True,
    metavar="TITLE CONTENT",
    help="Append a section (repeatable)",
)
@click.option(
    "--set-title",
    nargs=2,
    multiple=True,
    metavar="SECTION_ID TITLE",
    help="Change a section title (repeatable)",
)
@click.option(
    "--set-content",
    nargs=2,
    multiple=True,
    metavar="SECTION_ID CONTENT",
    help="Change a section's content (repeatable)",
)
@click.option("--delete-section", multiple=True, metavar="SECTION_ID", help="Remove a section")
@click.pass_context
def handbook_edit_item(
    ctx: click.Context,
    category_id: str,
    item_id: str,
    name: Optional[str],
    image: Optional[str],
    no_image: bool,
    add_section: tuple,
    set_title: tuple,
    set_content: tuple,
    delete_section: tuple,
) -> None:
    """Edit an item and save all changes at once.

    Changes are applied to a draft; nothing is saved if any of them fails.

    CATEGORY_ID: Category identifier
    ITEM_ID: Item identifier
    """
    require_admin(ctx)
    if image and no_image:
        fail("Use either --image or --no-image, not both.")

    repository = load_repository()
    session = EditingSession(repository)

    def edit() -> Handbook:
        session.begin_edit_item(category_id, repository.get_item(category_id, item_id))
        if name is not None:
            session.set_name(name)
        if image:
            session.set_image(image)
        if no_image:
            session.set_image(None)
        for section_id, title in set_title:
            session.update_section(section_id, "title", title)
        for section_id, content in set_content:
            session.update_section(section_id, "content", content)
        for section_id in delete_section:
            session.delete_section(section_id)
        for title, content in add_section:
            section = session.add_section()
            session.update_section(section.id, "title", title)
            session.update_section(section.id, "content", content)
        return session.save()

    snapshot = apply_change(repository, edit)
    item = snapshot.get_item(category_id, item_id)
    click.echo(f"✓ Saved item: {item.name} [{item.id}] ({len(item.sections)} sections)")


@handbook.command("delete-item")
@click.argument("category_id")
@click.argument("item_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def handbook_delete_item(ctx: click.Context, category_id: str, item_id: str, yes: bool) -> None:
    """Delete an item.

    CATEGORY_ID: Category identifier
    ITEM_ID: Item identifier
    """
    require_admin(ctx)
    repository = load_repository()
    item = repository.snapshot.get_item(category_id, item_id)
    if item is None:
        fail(f"Item '{item_id}' not found in category '{category_id}'.")

    if not yes:
        click.confirm(f"Delete item '{item.name}'?", abort=True)

    apply_change(repository, lambda: repository.delete_item(category_id, item_id))
    click.echo(f"✓ Deleted item: {item.name}")


@handbook.command("reset")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def handbook_reset(ctx: click.Context, yes: bool) -> None:
    """Restore the default handbook (discards all edits)."""
    require_admin(ctx)
    if not yes:
        click.confirm(
            click.style("⚠️  This will replace the handbook with the defaults. Continue?", fg="yellow"),
            abort=True,
        )
    repository = load_repository()
    snapshot = apply_change(repository, repository.reset)
    click.echo(click.style("✓ Handbook reset to defaults", fg="green"))
    click.echo(f"  {len(snapshot.categories)} categories, {snapshot.item_count} items")


@handbook.command("export")
@click.option("--output", "-o", type=click.Path(), help="Output file path")
def handbook_export(output: Optional[str]) -> None:
    """Export the handbook to a YAML file (stdout if no --output)."""
    from prakriti.handbook_file import export_handbook_yaml

    snapshot = load_repository().snapshot
    if output:
        export_handbook_yaml(snapshot, Path(output))
        click.echo(click.style(f"✓ Exported to {output}", fg="green"))
    else:
        click.echo(export_handbook_yaml(snapshot))


@handbook.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def handbook_import(ctx: click.Context, path: str, yes: bool) -> None:
    """Replace the handbook with the contents of a YAML file.

    PATH: Handbook file written by 'handbook export'
    """
    import yaml

    from prakriti.handbook_file import (
        handbook_from_document,
        parse_handbook_file,
        validate_handbook_document,
    )

    require_admin(ctx)
    try:
        document = parse_handbook_file(Path(path))
    except yaml.YAMLError as e:
        fail(f"Could not parse {path}: {e}")

    is_valid, errors = validate_handbook_document(document)
    if not is_valid:
        click.echo(f"Error: Invalid handbook file {path}:", err=True)
        for error in errors:
            click.echo(f"  - {error}", err=True)
        raise SystemExit(1)

    try:
        imported = handbook_from_document(document)
    except SchemaValidationError as e:
        fail(f"Invalid handbook file {path}: {e.error_count()} field errors")

    if not yes:
        click.confirm(
            f"Replace the handbook with {len(imported.categories)} categories from {path}?",
            abort=True,
        )

    repository = load_repository()
    snapshot = apply_change(repository, lambda: repository.load(imported))
    click.echo(f"✓ Imported {len(snapshot.categories)} categories, {snapshot.item_count} items")


# =============================================================================
# Config Commands
# =============================================================================


@cli.group()
def config() -> None:
    """View and change settings (~/.prakriti/config.json)."""
    pass


@config.command("show")
def config_show() -> None:
    """Show current settings."""
    settings = PrakritiConfig.load()
    click.echo(f"\n⚙️  Settings ({PrakritiConfig.get_config_path()})")
    for key, value in vars(settings).items():
        click.echo(f"  {key}: {value}")


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Change a setting.

    KEY: Setting name (e.g. chat_temperature)
    VALUE: New value
    """
    settings = PrakritiConfig.load()
    try:
        settings.set_value(key, value)
    except KeyError:
        fail(f"Unknown setting '{key}'.")
    except ValueError:
        fail(f"Invalid value for {key}: {value}")
    settings.save()
    click.echo(f"✓ {key} = {getattr(settings, key)}")


@config.command("reset")
def config_reset() -> None:
    """Restore default settings."""
    settings = PrakritiConfig.load()
    settings.reset()
    settings.save()
    click.echo("✓ Settings reset to defaults")


if __name__ == "__main__":
    cli()
