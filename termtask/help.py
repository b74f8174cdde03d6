from typing import List, Optional, Tuple

# ────────────────────────────────────────────────────────────────────────────
# Command catalog: name -> (description, usage lines)
# ────────────────────────────────────────────────────────────────────────────
HELP_DESC = {
    "help": ("Shows a list of commands or details for a specific command.", [
        "help [command] – details for one command, e.g. help note",
    ]),
    "clear": ("Clears all output from the terminal screen.", [
        "clear – no arguments",
    ]),
    "note": ("Create, edit, and manage text notes.", [
        "note – list all notes (alias: notes)",
        "note <text> – add a note",
        "note edit <search term> – edit the first note containing the term",
        "note del <search term> – delete the first note containing the term",
        "note save|open [file] – save or load notes",
    ]),
    "todo": ("Manage your to-do list.", [
        "todo – list all items (alias: todos)",
        "todo <text> – add an item",
        "todo done <number> – mark an item as done",
        "todo save|open [file] – save or load the list",
    ]),
    "link": ("Manage saved website links.", [
        "link – list all links (alias: links)",
        "link <url> [name] – add a link",
        "link go <name> – open a saved link in the browser",
        'link edit "<name>" "<new name>" – rename a link',
        "link del <name> – delete a link",
        "link save|open [file] – save or load links",
    ]),
    "cal": ("Display calendars and manage events.", [
        "cal – current month",
        "cal <YYMM> – a specific month, e.g. cal 2512",
        "cal view [YYMMDD|all] – events for one day or all days",
        'cal add <YYMMDD> "<event>" – add an event',
        "cal save|open [file] – save or load all events",
    ]),
    "contact": ("Manage your contact list.", [
        "contact – list all contacts (alias: contacts)",
        'contact add "<name>" "<info>" – add a contact',
        "contact find <name> – search by name",
        "contact del <name> – delete every contact with that name",
        "contact save|open [file] – save or load contacts",
    ]),
    "pomo": ("Start or stop a Pomodoro productivity timer.", [
        "pomo start [work_mins] [break_mins] – defaults to 25/5",
        "pomo stop – stop the current timer",
    ]),
    "timer": ("Start or stop a simple countdown timer.", [
        'timer <minutes> "[message]" – start a countdown',
        "timer stop – stop the current countdown",
    ]),
    "time": ("Displays the current local date and time.", [
        "time – no arguments",
    ]),
    "remind": ("Set a one-time reminder for a specific time.", [
        'remind HH:MM "<message>" – fires at the next occurrence of that time',
    ]),
    "calc": ("Evaluates a mathematical expression.", [
        "calc <expression> – e.g. calc (5 + 3) * 2",
    ]),
}

ALIASES = {
    "notes": "note",
    "todos": "todo",
    "links": "link",
    "contacts": "contact",
}


def canonical(name: str) -> str:
    return ALIASES.get(name, name)


def catalog() -> List[Tuple[str, str]]:
    return [(cmd, desc) for cmd, (desc, _) in HELP_DESC.items()]


def usage(topic: str) -> Optional[str]:
    entry = HELP_DESC.get(canonical(topic))
    if entry is None:
        return None
    return "\n".join(entry[1])
