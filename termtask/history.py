from typing import List, Optional


class CommandHistory:
    """
    Submitted command lines plus a recall cursor.

    ``cursor == len(entries)`` means nothing is being recalled. A line equal to
    the most recent entry is not stored twice.

    In the interactive console arrow-key recall is driven by ``readline``,
    which ``cli.run_line`` feeds with every line recorded here. ``back`` and
    ``forward`` give the same navigation to callers that hold the cursor
    themselves; the console does not call them.
    """

    def __init__(self):
        self.entries: List[str] = []
        self.cursor = 0

    def record(self, line: str) -> bool:
        added = bool(line) and (not self.entries or self.entries[-1] != line)
        if added:
            self.entries.append(line)
        self.cursor = len(self.entries)
        return added

    def back(self) -> Optional[str]:
        if not self.entries:
            return None
        if self.cursor > 0:
            self.cursor -= 1
        return self.entries[self.cursor]

    def forward(self) -> str:
        if self.cursor < len(self.entries) - 1:
            self.cursor += 1
            return self.entries[self.cursor]
        self.cursor = len(self.entries)
        return ""

    def __len__(self):
        return len(self.entries)
