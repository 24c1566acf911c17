import typer
from rich.console import Console
from rich.table import Table

from ..config import KNOWN_KEYS, ID_TOKEN_KEY, get_config_value, set_config_value
from ..domain.errors import ConfigError

app = typer.Typer()
console = Console()


@app.command("set")
def set_value(key: str, value: str):
    """store a setting in the config file."""
    try:
        set_config_value(key, value)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] {key} updated")


@app.command("show")
def show_values():
    """show the effective settings."""
    table = Table(title="Configuration")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    for key in KNOWN_KEYS:
        value = get_config_value(key)
        if value is None:
            shown = "[dim](not set)[/dim]"
        elif key == ID_TOKEN_KEY:
            # never echo credentials
            shown = "[dim](set)[/dim]"
        else:
            shown = value
        table.add_row(key, shown)

    console.print(table)


if __name__ == "__main__":
    app()
