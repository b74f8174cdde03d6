import calendar
import json
import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Callable, List, Optional
from urllib.parse import quote

from rich.markup import escape

from .errors import (EmptyContent, InvalidDateFormat, InvalidIndex,
                     MalformedImportFile, NotFound)
from .output import Response, reply
from .store import CAL_PREFIX, RecordStore

logger = logging.getLogger(__name__)

Editor = Callable[[int, str], Optional[str]]
Opener = Callable[[str], object]

SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
DAY_RE = re.compile(r"^\d{6}$")
MONTH_RE = re.compile(r"^\d{4}$")
INDEX_RE = re.compile(r"[0-9]+")
MONTH_NAMES = ["January", "February", "March", "April", "May", "June", "July",
               "August", "September", "October", "November", "December"]


def contains(haystack: str, term: str) -> bool:
    return term.lower() in haystack.lower()


def _require_term(term: str, what: str) -> str:
    if not term or not term.strip():
        raise EmptyContent(f"Please provide {what}.")
    return term


# ────────────────────────────────────────────────────────────────────────────
# Shared list/save/open behaviour
# ────────────────────────────────────────────────────────────────────────────
class CollectionHandler:
    key = ""
    category = "note"
    export_file = ""
    markup = False

    def __init__(self, store: RecordStore, export_dir="."):
        self.store = store
        self.export_dir = Path(export_dir)

    def format(self, record) -> str:
        return str(record)

    def is_valid(self, record) -> bool:
        return isinstance(record, str)

    def list(self) -> List[Response]:
        records = self.store.list(self.key)
        if not records:
            return reply(f"No {self.key} found.")
        lines = [f"{i}. {self.format(r)}" for i, r in enumerate(records, 1)]
        return reply("\n".join(lines), self.category, self.markup)

    def export(self, path: Optional[str] = None) -> List[Response]:
        records = self.store.list(self.key)
        if not records:
            return reply(f"No data in {self.key} to save.")
        target = resolve_path(self.export_dir, path, self.export_file)
        write_json(target, records)
        logger.info("Exported %d %s to %s", len(records), self.key, target)
        return reply(f"Data saved to {target.name}.", self.category)

    def load(self, path: Optional[str] = None) -> List[Response]:
        source = resolve_path(self.export_dir, path, self.export_file)
        records = read_json(source)
        if not isinstance(records, list) or not all(self.is_valid(r) for r in records):
            raise MalformedImportFile()
        self.store.replace_all(self.key, records)
        logger.info("Imported %d %s from %s", len(records), self.key, source)
        return reply(f"Loaded {len(records)} items into {self.key} from {source.name}.",
                     self.category)


def resolve_path(export_dir: Path, path: Optional[str], default: str) -> Path:
    p = Path(path).expanduser() if path else Path(default)
    return p if p.is_absolute() else export_dir / p


def write_json(path: Path, payload):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def read_json(path: Path):
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise MalformedImportFile(f"Could not read {path.name}.") from e
    except ValueError as e:
        raise MalformedImportFile() from e


# ────────────────────────────────────────────────────────────────────────────
# Notes
# ────────────────────────────────────────────────────────────────────────────
class Notes(CollectionHandler):
    key = "notes"
    category = "note"
    export_file = "notes.txt"

    def add(self, text: str) -> List[Response]:
        self.store.append(self.key, text)
        return reply("Note saved.", "note")

    def _find(self, term: str) -> int:
        _require_term(term, "text from the note")
        index = self.store.find_first(self.key, lambda note: contains(note, term))
        if index is None:
            raise NotFound(f'No note found matching "{term}".')
        return index

    def edit(self, term: str, editor: Editor) -> List[Response]:
        index = self._find(term)
        current = self.store.list(self.key)[index - 1]
        text = editor(index, current)
        if text is None:
            return reply("Edit cancelled.")
        self.store.replace_at(self.key, index, text)
        return reply(f"Note {index} saved.", "note")

    def delete(self, term: str) -> List[Response]:
        index = self._find(term)
        removed = self.store.remove_at(self.key, index)
        return reply(f'Note {index} deleted: "{removed}"', "note")


# ────────────────────────────────────────────────────────────────────────────
# Todos
# ────────────────────────────────────────────────────────────────────────────
class Todos(CollectionHandler):
    key = "todos"
    category = "todo"
    export_file = "todos.txt"

    def format(self, todo) -> str:
        return f"[{'x' if todo.get('done') else ' '}] {todo.get('text', '')}"

    def is_valid(self, todo) -> bool:
        return (isinstance(todo, dict) and isinstance(todo.get("text"), str)
                and isinstance(todo.get("done", False), bool))

    def add(self, text: str) -> List[Response]:
        if not text or not text.strip():
            raise EmptyContent()
        self.store.append(self.key, {"text": text, "done": False})
        return reply("Todo added.", "todo")

    def done(self, token) -> List[Response]:
        if not isinstance(token, str) or not INDEX_RE.fullmatch(token):
            raise InvalidIndex()
        index = int(token)
        todos = self.store.list(self.key)
        if not 1 <= index <= len(todos):
            raise InvalidIndex(f"Invalid todo index {index}.")
        todo = dict(todos[index - 1], done=True)
        self.store.replace_at(self.key, index, todo)
        return reply(f"Todo {index} marked as done.", "todo") + self.list()


# ────────────────────────────────────────────────────────────────────────────
# Links
# ────────────────────────────────────────────────────────────────────────────
def normalize_url(url: str) -> str:
    return url if SCHEME_RE.match(url) else "http://" + url


class Links(CollectionHandler):
    key = "links"
    category = "link"
    export_file = "links.txt"
    markup = True

    def format(self, link) -> str:
        url = link.get("url", "")
        target = quote(url, safe=":/?#@!$&'()*+,;=%")
        return f"{escape(link.get('name', ''))} - [link={target}]{escape(url)}[/link]"

    def is_valid(self, link) -> bool:
        return (isinstance(link, dict) and isinstance(link.get("name"), str)
                and isinstance(link.get("url"), str))

    def add(self, url: Optional[str], name: str = "") -> List[Response]:
        if not url or not url.strip():
            raise EmptyContent('URL is required. Use: link add <url> "[name]"')
        link_name = name.strip() if name and name.strip() else url
        self.store.append(self.key, {"name": link_name, "url": normalize_url(url)})
        return reply(f'Link saved: "{link_name}"', "link")

    def _find(self, term: str) -> int:
        _require_term(term, "a name to search for")
        index = self.store.find_first(self.key, lambda link: contains(link.get("name", ""), term))
        if index is None:
            raise NotFound(f'No link found matching "{term}".')
        return index

    def go(self, term: str, opener: Opener) -> List[Response]:
        link = self.store.list(self.key)[self._find(term) - 1]
        opener(link["url"])
        return reply(f'Opening "{link["name"]}"...', "link")

    def delete(self, term: str) -> List[Response]:
        removed = self.store.remove_at(self.key, self._find(term))
        return reply(f'Link deleted: "{removed["name"]}"', "link")

    def edit(self, term: str, new_name: Optional[str]) -> List[Response]:
        if not new_name or not new_name.strip():
            raise EmptyContent('Please provide a new name. Use: link edit "<old name>" "<new name>"')
        index = self._find(term)
        link = self.store.list(self.key)[index - 1]
        old_name = link["name"]
        self.store.replace_at(self.key, index, dict(link, name=new_name))
        return reply(f'Link renamed from "{old_name}" to "{new_name}".', "link")


# ────────────────────────────────────────────────────────────────────────────
# Contacts
# ────────────────────────────────────────────────────────────────────────────
class Contacts(CollectionHandler):
    key = "contacts"
    category = "note"
    export_file = "contacts.txt"

    def format(self, contact) -> str:
        return f"{contact.get('name', '')}: {contact.get('info', '')}"

    def is_valid(self, contact) -> bool:
        return (isinstance(contact, dict) and isinstance(contact.get("name"), str)
                and isinstance(contact.get("info"), str))

    def add(self, name: Optional[str], info: str) -> List[Response]:
        if not name or not name.strip() or not info or not info.strip():
            raise EmptyContent('Contact requires a name and info. Use: contact add "name" "info"')
        self.store.append(self.key, {"name": name, "info": info})
        return reply(f"Contact {name} added.", "note")

    def find(self, term: str) -> List[Response]:
        hits = [c for c in self.store.list(self.key) if contains(c.get("name", ""), term)]
        if not hits:
            return reply(f'No contact found matching "{term}".')
        return reply("\n".join(self.format(c) for c in hits), "note")

    def delete(self, name: str) -> List[Response]:
        _require_term(name, "a contact name")
        wanted = name.lower()
        removed = self.store.remove_where(self.key, lambda c: c.get("name", "").lower() == wanted)
        if not removed:
            raise NotFound(f'No contact named "{name}" found.')
        return reply(f'Contact(s) named "{name}" deleted ({len(removed)}).', "note")


# ────────────────────────────────────────────────────────────────────────────
# Calendar
# ────────────────────────────────────────────────────────────────────────────
def day_key(date_str: Optional[str]) -> str:
    if not date_str or not DAY_RE.match(date_str):
        raise InvalidDateFormat()
    try:
        datetime.strptime(date_str, "%y%m%d")
    except ValueError:
        raise InvalidDateFormat(f"'{date_str}' is not a real date.") from None
    return CAL_PREFIX + date_str


def pretty_day(date_str: str) -> str:
    return f"20{date_str[:2]}-{date_str[2:4]}-{date_str[4:6]}"


def render_month(year: int, month: int, today: Optional[date] = None) -> str:
    """Sun..Sat grid; today's cell is wrapped in ``[reverse]`` markup."""
    current = today.day if today and (today.year, today.month) == (year, month) else 0
    lines = [f"   {MONTH_NAMES[month - 1]} {year}", " Su Mo Tu We Th Fr Sa"]
    for week in calendar.Calendar(firstweekday=calendar.SUNDAY).monthdayscalendar(year, month):
        while week and week[-1] == 0:
            week.pop()
        cells = []
        for day in week:
            if not day:
                cells.append("   ")
            elif day == current:
                cells.append(f"[reverse]{day:2d}[/reverse] ")
            else:
                cells.append(f"{day:2d} ")
        lines.append("".join(cells).rstrip())
    return "\n".join(lines)


class Calendar:
    category = "calendar"
    export_file = "calendar.txt"

    def __init__(self, store: RecordStore, export_dir=".",
                 today: Callable[[], date] = date.today):
        self.store = store
        self.export_dir = Path(export_dir)
        self.today = today

    def add(self, date_str: Optional[str], text: str) -> List[Response]:
        key = day_key(date_str)
        if not text or not text.strip():
            raise EmptyContent("Event text cannot be empty.")
        self.store.append(key, text)
        return reply(f"Event added for {date_str}.", self.category)

    def view(self, date_str: Optional[str] = None) -> List[Response]:
        if not date_str or date_str == "all":
            return self.view_all()
        events = self.store.list(day_key(date_str))
        if not events:
            return reply(f"No events for {pretty_day(date_str)}.")
        lines = [f"{i}. {event}" for i, event in enumerate(events, 1)]
        return reply("\n".join(lines), self.category)

    def view_all(self) -> List[Response]:
        days = []
        for key in self.store.date_keys():
            events = self.store.list(key)
            if events:
                days.append((key[len(CAL_PREFIX):], events))
        if not days:
            return reply("No calendar events found.")
        days.sort(key=lambda d: d[0])
        blocks = []
        for date_str, events in days:
            lines = [f"[bold]{pretty_day(date_str)}:[/bold]"]
            lines += [f"  {i}. {escape(event)}" for i, event in enumerate(events, 1)]
            blocks.append("\n".join(lines))
        return reply("\n\n".join(blocks), self.category, markup=True)

    def month(self, yymm: Optional[str] = None) -> List[Response]:
        today = self.today()
        if yymm:
            if not MONTH_RE.match(yymm) or not 1 <= int(yymm[2:]) <= 12:
                raise InvalidDateFormat(f"Invalid month in '{yymm}'.")
            year, month = 2000 + int(yymm[:2]), int(yymm[2:])
        else:
            year, month = today.year, today.month
        return reply(render_month(year, month, today), self.category, markup=True)

    def export(self, path: Optional[str] = None) -> List[Response]:
        payload = {key: self.store.list(key) for key in self.store.date_keys()}
        if not payload:
            return reply("No calendar data to save.")
        target = resolve_path(self.export_dir, path, self.export_file)
        write_json(target, payload)
        logger.info("Exported %d calendar day(s) to %s", len(payload), target)
        return reply("Calendar data saved.", self.category)

    def load(self, path: Optional[str] = None) -> List[Response]:
        source = resolve_path(self.export_dir, path, self.export_file)
        payload = read_json(source)
        if not isinstance(payload, dict):
            raise MalformedImportFile("Could not parse calendar file.")
        for key, events in payload.items():
            if not (key.startswith(CAL_PREFIX) and DAY_RE.match(key[len(CAL_PREFIX):])
                    and isinstance(events, list)
                    and all(isinstance(e, str) for e in events)):
                raise MalformedImportFile("Could not parse calendar file.")
        for key in self.store.date_keys():
            if key not in payload:
                self.store.replace_all(key, [])
        for key, events in payload.items():
            self.store.replace_all(key, events)
        logger.info("Imported %d calendar day(s) from %s", len(payload), source)
        return reply(f"Calendar data loaded from {source.name}.", self.category)
