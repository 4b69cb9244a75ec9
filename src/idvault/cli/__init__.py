"""Main CLI application module."""

import typer
from rich.console import Console

from src.idvault.core.services.crypto.field_encryption import FieldEncryptionService

console = Console()

app = typer.Typer(
    help="idvault - identity service administration",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.command("generate-key")
def generate_key() -> None:
    """Print a fresh 256-bit encryption key as 64 hex characters."""
    # Plain print so the key can be piped into a secrets store
    print(FieldEncryptionService.generate_key())


@app.command("init-db")
def init_db() -> None:
    """Create the database tables."""
    from sqlalchemy.exc import SQLAlchemyError

    from src.idvault.runtime.init_db import init_db as _init_db

    try:
        _init_db()
    except SQLAlchemyError as e:
        console.print(f"[red]Failed to initialize database: {type(e).__name__}[/red]")
        raise typer.Exit(code=1) from e
    console.print("[green]Database initialized[/green]")


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from src.idvault.runtime.context import get_config

    config = get_config()
    uvicorn.run(
        "src.idvault.api.http.app:app",
        host=host or config.app.host,
        port=port or config.app.port,
        reload=reload,
        access_log=False,
    )


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
