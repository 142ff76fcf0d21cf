"""Daybook CLI - one diary entry per day."""

import asyncio
import json
import logging
import sys

import click

from .adapters.supabase_auth import AuthenticationError
from .config import load_config
from .core.dates import parse_entry_date
from .core.entry import DiaryEntry, Mood
from .entry_cache import DateKeyedEntryCache
from .workflows import get_auth, open_cache

EDIT_HELP = """Commands:
  p / n      previous / next day (repeat to jump, e.g. ppp)
  t          today
  g DATE     go to YYYY-MM-DD
  title TEXT set the title
  content    edit the content (opens $EDITOR without TEXT)
  mood N     set mood 1-5 (0 clears)
  s          save
  r          retry a day that failed to load
  q          quit"""


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _date_option(ctx, param, value: str | None) -> str | None:
    if value is None:
        return None
    try:
        return parse_entry_date(value)
    except ValueError:
        raise click.BadParameter(f"{value!r} is not a YYYY-MM-DD date")


def _open(config, target: str | None) -> DateKeyedEntryCache:
    """Open a cache for the signed-in user or exit with an error."""
    try:
        cache = open_cache(config, target)
    except AuthenticationError as e:
        _fail(str(e))
    if not cache.identity.is_ready:
        _fail("Not logged in. Run 'daybook login' first.")
    return cache


async def _load_entry(config, target: str | None) -> tuple[DateKeyedEntryCache, DiaryEntry]:
    cache = _open(config, target)
    await cache.settle()
    if cache.selected_date not in cache:
        _fail(f"Could not load entry for {cache.selected_date}")
    return cache, cache.current_entry


def _show_entry(entry: DiaryEntry) -> None:
    click.echo(f"── {entry.entry_date} ──")
    click.echo(f"Mood:  {Mood.label(entry.mood)}")
    click.echo(f"Title: {entry.title}")
    if entry.content.strip():
        click.echo()
        click.echo(entry.content.rstrip())


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Daybook - a diary with one entry per day."""
    config = load_config()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else config.log_level,
    )


# ============== Auth ==============


@main.command()
@click.option("--email", prompt=True)
@click.password_option(confirmation_prompt=False)
def login(email: str, password: str):
    """Log in with email and password."""
    try:
        get_auth(load_config()).sign_in(email.strip(), password)
    except AuthenticationError as e:
        _fail(str(e))
    click.echo(f"Logged in as {email.strip()}")


@main.command()
@click.option("--name", "full_name", prompt="Full name")
@click.option("--email", prompt=True)
@click.password_option()
def signup(full_name: str, email: str, password: str):
    """Create an account."""
    try:
        get_auth(load_config()).sign_up(email.strip(), password, full_name.strip())
    except AuthenticationError as e:
        _fail(str(e))
    click.echo(f"Account created for {email.strip()}. Check your inbox if confirmation is required.")


@main.command()
def logout():
    """Log out and forget the stored session."""
    try:
        get_auth(load_config()).sign_out()
    except AuthenticationError as e:
        _fail(str(e))
    click.echo("Logged out.")


@main.command()
def whoami():
    """Show the signed-in account."""
    config = load_config()
    if config.backend == "file":
        click.echo(f"{config.local_user_id} (local file backend)")
        return
    try:
        auth = get_auth(config)
        identity = auth.current_identity()
    except AuthenticationError as e:
        _fail(str(e))
    if identity.user_id is None:
        click.echo("Not logged in.")
        return
    click.echo(f"{auth.session.email} ({identity.user_id})")


# ============== Entries ==============


@main.command()
@click.option("--date", "-d", "target_date", default=None, callback=_date_option,
              help="Date to show (YYYY-MM-DD), defaults to today")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show(target_date: str | None, as_json: bool):
    """Show the entry for a day."""
    config = load_config()
    _, entry = asyncio.run(_load_entry(config, target_date))

    if as_json:
        click.echo(json.dumps(entry.to_row(), ensure_ascii=False, indent=2))
        return

    if entry.is_empty:
        click.echo(f"No entry for {entry.entry_date}.")
        return
    _show_entry(entry)


@main.command()
@click.option("--date", "-d", "target_date", default=None, callback=_date_option,
              help="Date to write (YYYY-MM-DD), defaults to today")
@click.option("--title", default=None, help="Entry title")
@click.option("--content", default=None, help="Entry content")
@click.option("--mood", type=click.IntRange(1, 5), default=None, help="Mood from 1 (great) to 5 (bad)")
def write(target_date: str | None, title: str | None, content: str | None, mood: int | None):
    """Update fields of a day's entry and save it."""
    fields = {
        name: value
        for name, value in (("title", title), ("content", content), ("mood", mood))
        if value is not None
    }
    if not fields:
        _fail("Nothing to write. Pass --title, --content or --mood.")

    async def _write() -> tuple[bool, DiaryEntry]:
        cache, _ = await _load_entry(load_config(), target_date)
        entry = cache.update(**fields)
        return await cache.save(), entry

    saved, entry = asyncio.run(_write())
    if not saved:
        _fail(f"Could not save entry for {entry.entry_date}")
    click.echo(f"✓ Saved entry for {entry.entry_date}")


@main.command()
@click.option("--date", "-d", "target_date", default=None, callback=_date_option,
              help="Date to start on (YYYY-MM-DD), defaults to today")
def edit(target_date: str | None):
    """Browse and edit entries day by day."""
    asyncio.run(_edit_session(load_config(), target_date))


async def _prompt(text: str = ">", suffix: str = " ") -> str:
    # Prompt in a thread so pending fetches keep running
    return await asyncio.to_thread(
        click.prompt, text, default="", show_default=False, prompt_suffix=suffix
    )


async def _edit_session(config, target_date: str | None) -> None:
    cache = _open(config, target_date)
    click.echo(EDIT_HELP)
    try:
        while True:
            await cache.settle()
            # current_entry still holds the previous day's fields after a failed fetch
            loaded = cache.selected_date in cache
            click.echo()
            if loaded:
                _show_entry(cache.current_entry)
            else:
                click.echo(f"Could not load entry for {cache.selected_date} (r to retry)", err=True)
            line = (await _prompt()).strip()
            command, _, arg = line.partition(" ")
            arg = arg.strip()

            if command and set(command) <= {"p", "n"}:
                for step in command:
                    if step == "p":
                        cache.previous_day()
                    else:
                        cache.next_day()
            elif command == "t":
                cache.today()
            elif command == "g":
                try:
                    cache.select(parse_entry_date(arg))
                except ValueError:
                    click.echo(f"{arg!r} is not a YYYY-MM-DD date")
            elif command == "r":
                cache.load_selected()
            elif command in ("title", "content", "mood", "s") and not loaded:
                click.echo(f"Entry for {cache.selected_date} is not loaded; not editing it", err=True)
            elif command == "title":
                cache.update(title=arg or (await _prompt("Title", ": ")).strip())
            elif command == "content":
                text = arg or await asyncio.to_thread(click.edit, cache.current_entry.content)
                if text is not None:
                    cache.update(content=text)
            elif command == "mood":
                try:
                    value = int(arg)
                    cache.update(mood=value or None)
                except ValueError:
                    click.echo("Mood must be a number from 1 to 5 (0 clears)")
            elif command == "s":
                if await cache.save():
                    click.echo(f"✓ Saved entry for {cache.selected_date}")
                else:
                    click.echo(f"Could not save entry for {cache.selected_date}", err=True)
            elif command == "q":
                break
            elif command:
                click.echo(EDIT_HELP)
    finally:
        cache.close()


if __name__ == "__main__":
    main()
