import typer
import asyncio
from typing import Any, Coroutine, Optional, TypeVar
from rich.console import Console
from rich.table import Table

from ..config import (
    IDENTITY_CACHE_FILE,
    DATABASE_KEY,
    DEFAULT_DATABASE,
    ID_TOKEN_KEY,
    get_config_value,
    get_project_id,
    get_timeout,
)
from ..domain.errors import IdentityUnavailable, ProfileNotFoundError, ProfileSyncError
from ..observability import setup_logging
from ..profiles import (
    AuthStateNotifier,
    DeletionOutcome,
    JsonIdentityCache,
    ProfilesController,
)
from ..store.client import DocumentStore
from ..store.firestore import FirestoreStore
from ..ui.navigation import ConsoleNavigator
from ..ui.prompts import ConsoleConfirmationSurface
from .config_commands import app as config_app

app = typer.Typer()
console = Console()

app.add_typer(config_app, name="config", help="Manage profilesync settings")

T = TypeVar("T")

USER_OPTION_HELP = "User id to act as. Defaults to the cached signed-in user."


def get_store() -> DocumentStore:
    """build the Firestore store from config."""
    return FirestoreStore(
        project_id=get_project_id(),
        database=get_config_value(DATABASE_KEY) or DEFAULT_DATABASE,
        id_token=get_config_value(ID_TOKEN_KEY),
        timeout=get_timeout(),
    )


def get_identity_cache() -> JsonIdentityCache:
    return JsonIdentityCache(IDENTITY_CACHE_FILE)


def build_controller(
    store: DocumentStore, user: Optional[str], assume_yes: bool = False
) -> ProfilesController:
    # --user stands in for a live sign-in on the auth stream
    return ProfilesController(
        auth=AuthStateNotifier(user),
        cache=get_identity_cache(),
        store=store,
        navigator=ConsoleNavigator(console),
        surface=ConsoleConfirmationSurface(console, assume_yes=assume_yes),
    )


async def _close_store(store: DocumentStore):
    aclose = getattr(store, "aclose", None)
    if aclose is not None:
        await aclose()


async def _synced(controller: ProfilesController) -> str:
    """wait for the cache read and any loads it triggered, then demand an identity."""
    await controller.settle()
    return controller.resolver.require()


def _open_store() -> DocumentStore:
    try:
        return get_store()
    except ProfileSyncError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


def _run(coro: Coroutine[Any, Any, T]) -> T:
    try:
        return asyncio.run(coro)
    except IdentityUnavailable as e:
        console.print(f"[red]Error:[/red] {e}. Sign in first or pass --user.")
        raise typer.Exit(code=1)
    except ProfileSyncError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")
):
    """keep your profiles in sync with the cloud."""
    setup_logging(verbose=verbose)


@app.command("list")
def list_profiles(user: Optional[str] = typer.Option(None, "--user", "-u", help=USER_OPTION_HELP)):
    """list the profiles of the signed-in user."""
    store = _open_store()

    async def run():
        try:
            async with build_controller(store, user) as controller:
                await _synced(controller)
                return list(controller.profiles)
        finally:
            await _close_store(store)

    profiles = _run(run())

    if not profiles:
        console.print("[yellow]No profiles found.[/yellow]")
        console.print("\nProfiles are created from the app's [cyan]Create new profile[/cyan] screen.")
        return

    table = Table(title="Profiles")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Surname", style="white")

    for profile in profiles:
        table.add_row(profile.id, profile.name, profile.surname)

    console.print(table)


@app.command("delete")
def delete_profile(
    profile_id: str,
    user: Optional[str] = typer.Option(None, "--user", "-u", help=USER_OPTION_HELP),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """delete a profile after confirmation."""
    store = _open_store()

    async def run():
        try:
            async with build_controller(store, user, assume_yes=yes) as controller:
                await _synced(controller)
                if controller.state.get(profile_id) is None:
                    raise ProfileNotFoundError(profile_id)
                return await controller.delete_profile(profile_id)
        finally:
            await _close_store(store)

    outcome = _run(run())

    if outcome is DeletionOutcome.CANCELLED:
        console.print("[dim]Cancelled.[/dim]")
    elif outcome is DeletionOutcome.FAILED:
        raise typer.Exit(code=1)


@app.command("open")
def open_profile(
    profile_id: str,
    user: Optional[str] = typer.Option(None, "--user", "-u", help=USER_OPTION_HELP),
):
    """open a profile's home screen."""
    store = _open_store()

    async def run():
        try:
            async with build_controller(store, user) as controller:
                await _synced(controller)
                controller.select_profile(profile_id)
        finally:
            await _close_store(store)

    _run(run())


if __name__ == "__main__":
    app()
