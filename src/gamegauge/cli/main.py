"""GameGauge CLI — inspect, back up and restore boards from a terminal.

Usage:
    gamegauge login a@x.com                      # Print a bearer token
    gamegauge boards                             # List your boards
    gamegauge show 42                            # Ranking of one board
    gamegauge export 42 -o game-night.json       # Board → JSON file
    gamegauge import game-night.json             # JSON file → new board
    gamegauge restart 42                         # Wipe all scores of a board

The token comes from GAMEGAUGE_TOKEN (see `gamegauge login`), the
server from GAMEGAUGE_API_URL.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("GAMEGAUGE_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the GameGauge API."""
    headers = {}
    token = os.environ.get("GAMEGAUGE_TOKEN")
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _check(r: httpx.Response) -> None:
    """Exit with the API's error message on any non-2xx response."""
    if r.is_success:
        return
    try:
        body = r.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    if r.status_code == 401:
        msg = "Not authenticated. Set GAMEGAUGE_TOKEN (see `gamegauge login`)."
    elif "errors" in body:
        msg = "; ".join(f"{k}: {v}" for k, v in body["errors"].items())
    else:
        msg = body.get("detail") or r.text or r.reason_phrase
    click.secho(f"Error ({r.status_code}): {msg}", fg="red", err=True)
    sys.exit(1)


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "-"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="gamegauge")
def main():
    """GameGauge — scoreboards for game nights."""


# ---------------------------------------------------------------------------
# gamegauge login
# ---------------------------------------------------------------------------


@main.command()
@click.argument("email")
@click.password_option("--password", "-p", confirmation_prompt=False)
@click.option("--recaptcha-token", help="Only needed when the server enforces reCAPTCHA")
def login(email: str, password: str, recaptcha_token: Optional[str]):
    """Log in and print a token for GAMEGAUGE_TOKEN."""
    _run(_login_impl(email, password, recaptcha_token))


async def _login_impl(email: str, password: str, recaptcha_token: Optional[str]):
    async with _client() as c:
        r = await c.post("/api/auth/login", json={
            "email": email,
            "password": password,
            "recaptcha_token": recaptcha_token,
        })
        _check(r)
        click.echo(r.json()["token"])


# ---------------------------------------------------------------------------
# gamegauge boards
# ---------------------------------------------------------------------------


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Raw JSON output")
def boards(as_json: bool):
    """List your boards in display order."""
    _run(_boards_impl(as_json))


async def _boards_impl(as_json: bool):
    async with _client() as c:
        r = await c.get("/api/boards")
        _check(r)
        data = r.json()

    if as_json:
        click.echo(_pretty_json(data))
        return
    if not data:
        click.echo("No boards yet.")
        return

    rows = [
        {
            "id": b["id"],
            "name": b["name"],
            "condition": b["score_condition"],
            "players": len(b["participants"]),
            "rounds": b["number_of_rounds"] or "-",
        }
        for b in data
    ]
    _print_table(rows, [
        ("ID", "id", 6),
        ("NAME", "name", 30),
        ("CONDITION", "condition", 13),
        ("PLAYERS", "players", 7),
        ("ROUNDS", "rounds", 6),
    ])


# ---------------------------------------------------------------------------
# gamegauge show
# ---------------------------------------------------------------------------


@main.command()
@click.argument("board_id", type=int)
def show(board_id: int):
    """Show one board's ranking."""
    _run(_show_impl(board_id))


async def _show_impl(board_id: int):
    async with _client() as c:
        r = await c.get(f"/api/boards/{board_id}")
        _check(r)
        board = r.json()

    click.secho(f"{board['name']}  (#{board['id']}, {board['score_condition']})", bold=True)
    if board.get("target_score") is not None:
        click.echo(f"Target score: {board['target_score']}")
    click.echo()

    participants = board["participants"]
    if not participants:
        click.echo("No participants.")
        return

    # The API ranks highest total first; flip it for lowest-wins boards.
    if board["score_condition"] == "LOWEST_WINS":
        participants = sorted(participants, key=lambda p: (p["total_score"], p["id"]))

    for rank, p in enumerate(participants, start=1):
        rounds = " ".join(str(s["score_value"]) for s in p["scores"])
        click.echo(f"  {rank:>2}. {p['name']:20s} {p['total_score']:>6}   [{rounds}]")


# ---------------------------------------------------------------------------
# gamegauge export / import
# ---------------------------------------------------------------------------


@main.command()
@click.argument("board_id", type=int)
@click.option("--output", "-o", type=click.Path(dir_okay=False, writable=True),
              help="Write to a file instead of stdout")
def export(board_id: int, output: Optional[str]):
    """Export a board (participants and scores) as JSON."""
    _run(_export_impl(board_id, output))


async def _export_impl(board_id: int, output: Optional[str]):
    async with _client() as c:
        r = await c.get(f"/api/boards/{board_id}/export")
        _check(r)
        data = r.json()

    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(_pretty_json(data))
        click.secho(f"Board #{board_id} exported to {output}", fg="green")
    else:
        click.echo(_pretty_json(data))


@main.command(name="import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def import_(path: str):
    """Create a new board from an exported JSON file."""
    _run(_import_impl(path))


async def _import_impl(path: str):
    with open(path, encoding="utf-8") as f:
        try:
            payload = json.load(f)
        except json.JSONDecodeError as e:
            click.secho(f"Error: {path} is not valid JSON ({e})", fg="red", err=True)
            sys.exit(1)

    async with _client() as c:
        r = await c.post("/api/boards/import", json=payload)
        _check(r)
        board = r.json()

    click.secho(
        f"Imported board #{board['id']} \"{board['name']}\" "
        f"with {len(board['participants'])} participant(s)",
        fg="green",
    )


# ---------------------------------------------------------------------------
# gamegauge restart
# ---------------------------------------------------------------------------


@main.command()
@click.argument("board_id", type=int)
@click.confirmation_option(prompt="Delete every score on this board?")
def restart(board_id: int):
    """Wipe all scores of a board. Participants are kept."""
    _run(_restart_impl(board_id))


async def _restart_impl(board_id: int):
    async with _client() as c:
        r = await c.post(f"/api/boards/{board_id}/restart")
        _check(r)
    click.secho(f"Board #{board_id} restarted", fg="green")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
