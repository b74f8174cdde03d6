import functools
import logging
import re
import webbrowser
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence

from . import help as help_catalog
from .calculator import calculate
from .errors import (ActionNotFound, CommandNotFound, EmptyExpression,
                     InvalidDuration, InvalidTimeFormat, TermTaskError)
from .handlers import (MONTH_RE, Calendar, Contacts, Editor, Links, Notes,
                       Opener, Todos)
from .history import CommandHistory
from .output import Response, error, reply
from .scheduler import Scheduler
from .store import RecordStore
from .tokenizer import parse

logger = logging.getLogger(__name__)

URL_RE = re.compile(r"^https?:", re.IGNORECASE)

Responses = List[Response]
Params = List[str]


def report_errors(fn):
    """Turn any TermTaskError into a single error response."""
    @functools.wraps(fn)
    def wrap(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except TermTaskError as e:
            logger.debug("%s: %s", type(e).__name__, e.message)
            return [error(e.message)]
    return wrap


def _first(params: Sequence[str]) -> Optional[str]:
    return params[0] if params else None


def _rest(params: Sequence[str], start: int = 1) -> str:
    return " ".join(params[start:])


def _no_editor(index: int, text: str) -> Optional[str]:
    return None


@dataclass
class Command:
    """
    One top-level command.

    ``actions`` is the allow-list checked against the second token; only a
    listed word reaches ``handlers``. Anything else goes to ``fallback`` with
    every token after the command, or is rejected when there is none.
    """
    name: str
    actions: FrozenSet[str]
    handlers: Dict[str, Callable[[Params], Responses]]
    on_empty: Callable[[], Responses]
    fallback: Optional[Callable[[Params], Responses]] = None
    usage: str = ""
    aliases: Sequence[str] = ()

    def __post_init__(self):
        assert set(self.handlers) == set(self.actions), self.name

    def run(self, args: Params) -> Responses:
        if not args:
            return self.on_empty()
        action, params = args[0], args[1:]
        if action in self.actions:
            return self.handlers[action](params)
        if self.fallback is None:
            raise ActionNotFound(self.usage)
        return self.fallback(args)


class Dispatcher:
    def __init__(self, store: RecordStore, scheduler: Scheduler, export_dir=".",
                 editor: Editor = _no_editor, opener: Opener = webbrowser.open):
        self.scheduler = scheduler
        self.lock = scheduler.lock
        self.editor = editor
        self.opener = opener
        self.history = CommandHistory()

        self.notes = Notes(store, export_dir)
        self.todos = Todos(store, export_dir)
        self.links = Links(store, export_dir)
        self.contacts = Contacts(store, export_dir)
        self.calendar = Calendar(store, export_dir, today=lambda: self.scheduler.now().date())

        self.commands: Dict[str, Command] = {}
        for command in self._build_commands():
            for name in (command.name, *command.aliases):
                self.commands[name] = command

    # ────────────────────────────────────────────────────────────────────────
    # Entry points
    # ────────────────────────────────────────────────────────────────────────
    def execute(self, line: str) -> Responses:
        line = line.strip()
        if not line:
            return []
        self.history.record(line)
        with self.lock:
            return self.dispatch(parse(line))

    @report_errors
    def dispatch(self, tokens: Sequence[str]) -> Responses:
        if not tokens:
            return []
        head, args = tokens[0], list(tokens[1:])
        if URL_RE.match(head):
            self.opener(head)
            return reply(f"Opening {head}...", "link")
        command = self.commands.get(head)
        if command is None:
            raise CommandNotFound(f"Command not found '{head}'.")
        logger.debug("Dispatching %s %s", command.name, args)
        return command.run(args)

    # ────────────────────────────────────────────────────────────────────────
    # Command table
    # ────────────────────────────────────────────────────────────────────────
    def _build_commands(self) -> List[Command]:
        notes, todos, links = self.notes, self.todos, self.links
        contacts, cal, sched = self.contacts, self.calendar, self.scheduler

        def pomo_usage():
            raise ActionNotFound("'pomo' requires an action (start, stop).")

        def timer_usage():
            raise InvalidDuration('Usage: timer [minutes] "[message]" or timer stop')

        def no_time():
            raise InvalidTimeFormat()

        def no_expression():
            raise EmptyExpression()

        def cal_month(args: Params) -> Responses:
            if len(args) == 1 and MONTH_RE.match(args[0]):
                return cal.month(args[0])
            raise ActionNotFound("'cal' action not found. Use: add, view, save, open, or YYMM.")

        clear = lambda *_: [Response("", "clear")]
        now = lambda *_: reply(sched.now().strftime("%Y-%m-%d %H:%M:%S"))

        return [
            Command("help", frozenset(), {}, self._help_catalog, fallback=self._help_topic),
            Command("clear", frozenset(), {}, clear, fallback=clear),
            Command(
                "note", frozenset({"add", "edit", "del", "save", "open"}),
                {
                    "add": lambda p: notes.add(_rest(p, 0)),
                    "edit": lambda p: notes.edit(_rest(p, 0), self.editor),
                    "del": lambda p: notes.delete(_rest(p, 0)),
                    "save": lambda p: notes.export(_first(p)),
                    "open": lambda p: notes.load(_first(p)),
                },
                notes.list, fallback=lambda a: notes.add(_rest(a, 0)), aliases=("notes",),
            ),
            Command(
                "todo", frozenset({"add", "done", "save", "open"}),
                {
                    "add": lambda p: todos.add(_rest(p, 0)),
                    "done": lambda p: todos.done(_first(p)),
                    "save": lambda p: todos.export(_first(p)),
                    "open": lambda p: todos.load(_first(p)),
                },
                todos.list, fallback=lambda a: todos.add(_rest(a, 0)), aliases=("todos",),
            ),
            Command(
                "link", frozenset({"add", "del", "edit", "go", "save", "open"}),
                {
                    "add": lambda p: links.add(_first(p), _rest(p)),
                    "del": lambda p: links.delete(_rest(p, 0)),
                    "edit": lambda p: links.edit(_first(p), p[1] if len(p) > 1 else None),
                    "go": lambda p: links.go(_rest(p, 0), self.opener),
                    "save": lambda p: links.export(_first(p)),
                    "open": lambda p: links.load(_first(p)),
                },
                links.list, fallback=lambda a: links.add(a[0], _rest(a)), aliases=("links",),
            ),
            Command(
                "contact", frozenset({"add", "find", "del", "save", "open"}),
                {
                    "add": lambda p: contacts.add(_first(p), _rest(p)),
                    "find": lambda p: contacts.find(_rest(p, 0)),
                    "del": lambda p: contacts.delete(_rest(p, 0)),
                    "save": lambda p: contacts.export(_first(p)),
                    "open": lambda p: contacts.load(_first(p)),
                },
                contacts.list,
                usage="Unknown 'contact' action. Use: add, find, del, save, open.",
                aliases=("contacts",),
            ),
            Command(
                "cal", frozenset({"add", "view", "save", "open"}),
                {
                    "add": lambda p: cal.add(_first(p), _rest(p)),
                    "view": lambda p: cal.view(_first(p)),
                    "save": lambda p: cal.export(_first(p)),
                    "open": lambda p: cal.load(_first(p)),
                },
                cal.month, fallback=cal_month,
            ),
            Command(
                "pomo", frozenset({"start", "stop"}),
                {
                    "start": lambda p: reply(sched.start_pomodoro(_first(p), p[1] if len(p) > 1 else None), "help"),
                    "stop": lambda p: reply(sched.stop_pomodoro(), "help"),
                },
                pomo_usage, usage="'pomo' requires an action (start, stop).",
            ),
            Command(
                "timer", frozenset({"stop"}),
                {"stop": lambda p: reply(sched.stop_countdown(), "help")},
                timer_usage,
                fallback=lambda a: reply(sched.start_countdown(a[0], _rest(a)), "help"),
            ),
            Command("remind", frozenset(), {}, no_time, fallback=self._remind),
            Command("time", frozenset(), {}, now, fallback=now),
            Command("calc", frozenset(), {}, no_expression,
                    fallback=lambda a: reply(f"› {calculate(_rest(a, 0))}")),
        ]

    # ────────────────────────────────────────────────────────────────────────
    # Small commands
    # ────────────────────────────────────────────────────────────────────────
    def _help_catalog(self) -> Responses:
        return [
            Response("Available Commands:", "help", rows=help_catalog.catalog()),
            Response("Type 'help [command]' for more details.", "note"),
        ]

    def _help_topic(self, args: Params) -> Responses:
        text = help_catalog.usage(args[0])
        if text is None:
            raise CommandNotFound(f"No help found for command '{args[0]}'.")
        return reply(text)

    def _remind(self, args: Params) -> Responses:
        target = self.scheduler.remind(args[0], _rest(args))
        when = "today" if target.date() == self.scheduler.now().date() else "tomorrow"
        return reply(f"Reminder set for {target:%H:%M} {when}.", "help")
