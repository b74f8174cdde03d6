import argparse
import logging
import shutil
import subprocess
import threading
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import Settings, setup_logging
from .dispatcher import Dispatcher
from .output import Response, error
from .scheduler import Scheduler
from .store import JsonFileStore, RecordStore

try:
    import readline
except ImportError:  # Windows
    readline = None

logger = logging.getLogger(__name__)

# ────────────────────────────────────────────────────────────────────────────
# Rich console
# ────────────────────────────────────────────────────────────────────────────
console = Console()

STYLES = {
    "note": "bright_cyan",
    "todo": "green",
    "link": "deep_sky_blue1",
    "calendar": "magenta",
    "help": "yellow",
    "response": "white",
    "error": "bold red",
}
EXIT_WORDS = ("exit", "quit", "close")


def ok(msg): return f"[green]✔ {msg}[/]"


def render(resp: Response, out: Console = console):
    if resp.category == "clear":
        out.clear()
        return
    style = STYLES.get(resp.category, "")
    if resp.rows is not None:
        table = Table(title=f"\n📘 {resp.text}", header_style="bold blue", style="bold bright_cyan")
        table.add_column("Command", justify="center", style="bold deep_sky_blue1", no_wrap=True)
        table.add_column("Description", style="white")
        for cmd, desc in resp.rows:
            table.add_row(f"[green]{escape(cmd)}[/green]", escape(desc))
        out.print(table)
    elif resp.markup:
        out.print(resp.text, style=style)
    else:
        out.print(Text(resp.text, style=style))


# ────────────────────────────────────────────────────────────────────────────
# Alerts
# ────────────────────────────────────────────────────────────────────────────
def send_notification(title: str, message: str):
    binary = shutil.which("notify-send")
    if binary is None:
        logger.debug("notify-send not found; skipping desktop notification")
        return
    try:
        subprocess.run([binary, title, message], check=False, timeout=5)
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("Desktop notification failed: %s", e)


def make_alert(out: Console, notifications: bool):
    """Alert sink for the scheduler; ``notifications`` is fixed at start-up."""
    def alert(title: str, message: str):
        out.print(Panel(Text(message), title=f"⏰ {title}", border_style="magenta"))
        if notifications:
            send_notification(title, message)
    return alert


def prompt_editor(index: int, text: str) -> Optional[str]:
    console.print(f"[bold]Editing note {index}[/] [dim](empty line cancels)[/]")
    console.print(Text(text, style="dim"))
    new = console.input("[bold]New text >>> [/]").strip()
    return new or None


# ────────────────────────────────────────────────────────────────────────────
# Wiring
# ────────────────────────────────────────────────────────────────────────────
def build_app(settings: Settings, out: Console = console, editor=prompt_editor) -> Dispatcher:
    lock = threading.RLock()
    store = RecordStore(JsonFileStore(str(settings.store_path)))
    scheduler = Scheduler(make_alert(out, settings.notifications), lock=lock,
                          pomo_work=settings.pomo_work, pomo_break=settings.pomo_break)
    return Dispatcher(store, scheduler, export_dir=settings.export_dir, editor=editor)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="termtask", description="Notes, todos, links, "
                                     "contacts, calendar and timers in your terminal.")
    parser.add_argument("--data-dir", type=Path, help="directory holding store.json")
    parser.add_argument("--export-dir", type=Path, help="default directory for save/open")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ...")
    return parser.parse_args(argv)


def load_settings(args) -> Settings:
    settings = Settings.from_env()
    if args.data_dir:
        settings.data_dir = args.data_dir
    if args.export_dir:
        settings.export_dir = args.export_dir
    if args.log_level:
        settings.log_level = args.log_level.upper()
    return settings


# ────────────────────────────────────────────────────────────────────────────
# Main loop
# ────────────────────────────────────────────────────────────────────────────
def run_line(app: Dispatcher, raw: str, out: Console = console):
    before = len(app.history)
    try:
        for resp in app.execute(raw):
            render(resp, out)
    except Exception:
        logger.exception("Command failed: %s", raw)
        render(error("Command failed, see the log for details."), out)
    if readline is not None and len(app.history) > before:
        readline.add_history(raw.strip())


def main(argv=None):
    settings = load_settings(parse_args(argv))
    setup_logging(settings.log_level)
    app = build_app(settings)
    if readline is not None:
        readline.set_auto_history(False)
    logger.info("Store at %s", settings.store_path)

    console.print("\nWelcome to [bold yellow]TermTask[/] – type [green]help[/] for a list of commands 🤖\n")
    if settings.notifications:
        console.print("[dim]Desktop notifications enabled.[/]")

    while True:
        try:
            raw = console.input("[bold]termtask[/][orchid]>>>[/] ").strip()
        except (EOFError, KeyboardInterrupt):
            console.print("\n" + ok("Bye!"))
            break
        if raw in EXIT_WORDS:
            console.print(ok("Data saved. Bye!"))
            break
        run_line(app, raw)


if __name__ == "__main__":
    main()
