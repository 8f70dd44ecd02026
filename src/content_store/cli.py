"""CLI interface for the content store."""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from content_store.api import (
    CONTENT_PREFIX,
    PUBLISH_INTENT_PREFIX,
    ApiResponse,
    ContentStoreAPI,
    build_api,
    encode_path,
)
from content_store.cache import cache_expiry
from content_store.config import ContentStoreConfig, load_config, merge_cli_overrides

app = typer.Typer(
    name="content-store",
    help="Store content items and keep the router in step with them.",
)

console = Console()

_state: dict[str, ContentStoreConfig] = {}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from content_store import __version__

        console.print(f"content-store {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .content-store.toml file."),
    ] = None,
    store_dir: Annotated[
        Optional[Path],
        typer.Option("--store-dir", help="Directory holding the JSON store files."),
    ] = None,
    router_url: Annotated[
        Optional[str],
        typer.Option("--router-url", help="Base URL of the router API."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log debug output."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Content Store - versioned content documents keyed by base path."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = load_config(config_path)
    _state["config"] = merge_cli_overrides(
        config,
        store_directory=str(store_dir) if store_dir is not None else None,
        router_url=router_url,
    )


def _api() -> ContentStoreAPI:
    return build_api(_state["config"])


def _read_payload(path: Path) -> str:
    if not path.exists():
        console.print(f"[red]Error:[/red] File not found: {path}")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


def _report(response: ApiResponse, success: str) -> None:
    """Print the outcome of a request; exit 1 unless it succeeded."""
    if response.status < 300:
        console.print(f"[green]{success}[/green]")
        return
    errors = response.body.get("errors")
    if errors:
        console.print("[red]Validation failed:[/red]")
        for field, messages in errors.items():
            for message in messages:
                console.print(f"  - {field}: {message}")
    else:
        console.print(f"[red]Error:[/red] {response.body.get('message', response.status)}")
    raise typer.Exit(1)


@app.command()
def put(
    base_path: Annotated[str, typer.Argument(help="Base path of the item, e.g. /vat-rates.")],
    file: Annotated[
        Path,
        typer.Option("--file", "-f", help="JSON payload for the content item."),
    ],
) -> None:
    """Create or replace a content item."""
    response = _api().update_content_item(f"{CONTENT_PREFIX}{base_path}", _read_payload(file))
    verb = "Created" if response.status == 201 else "Replaced"
    _report(response, f"{verb} {encode_path(base_path)}")


@app.command()
def show(
    base_path: Annotated[str, typer.Argument(help="Base path of the item.")],
) -> None:
    """Print a content item with its links resolved."""
    response = _api().show_content_item(f"{CONTENT_PREFIX}{base_path}")
    if response.status != 200:
        console.print(f"[yellow]No content item at {base_path}[/yellow]")
        raise typer.Exit(1)
    console.print_json(json.dumps(response.body))


@app.command("put-intent")
def put_intent(
    base_path: Annotated[str, typer.Argument(help="Base path the intent applies to.")],
    file: Annotated[
        Path,
        typer.Option("--file", "-f", help="JSON payload for the publish intent."),
    ],
) -> None:
    """Create or replace a publish intent."""
    response = _api().update_publish_intent(
        f"{PUBLISH_INTENT_PREFIX}{base_path}", _read_payload(file)
    )
    _report(response, f"Saved publish intent for {encode_path(base_path)}")


@app.command("delete-intent")
def delete_intent(
    base_path: Annotated[str, typer.Argument(help="Base path the intent applies to.")],
) -> None:
    """Delete a publish intent."""
    response = _api().destroy_publish_intent(f"{PUBLISH_INTENT_PREFIX}{base_path}")
    if response.status == 404:
        console.print(f"[yellow]No publish intent at {base_path}[/yellow]")
        raise typer.Exit(1)
    console.print(f"[green]Deleted publish intent for {base_path}[/green]")


@app.command()
def expiry(
    base_path: Annotated[str, typer.Argument(help="Base path of the item.")],
) -> None:
    """Print when a response for BASE_PATH would expire from caches."""
    config = _state["config"]
    api = _api()
    now = datetime.now(tz=UTC)
    intent = api.publish_intents.get(encode_path(base_path))
    expires_at = cache_expiry(
        now, intent, config.cache.default_ttl_delta, config.cache.minimum_ttl_delta
    )
    console.print(f"Expires at: {expires_at.isoformat()}")
    if intent is not None and not intent.past(now):
        console.print(f"Publish intent scheduled for {intent.publish_time.isoformat()}")


if __name__ == "__main__":
    app()
