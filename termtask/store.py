import copy
import json
import logging
import os
from collections import UserDict
from typing import Any, Callable, List, Optional

from .errors import EmptyContent, IndexOutOfRange

logger = logging.getLogger(__name__)

CAL_PREFIX = "cal-"
CAL_INDEX_KEY = "_calendar_index"


# ────────────────────────────────────────────────────────────────────────────
# Key/value backends
# ────────────────────────────────────────────────────────────────────────────
class KeyValueStore(UserDict):
    """In-memory key -> JSON sequence mapping. Subclasses persist on flush()."""

    def get_list(self, key: str) -> List[Any]:
        # callers mutate what they get back, so never hand out the stored object
        return copy.deepcopy(self.data.get(key))

    def set_list(self, key: str, value: List[Any]):
        self.data[key] = copy.deepcopy(value)
        self.flush()

    def flush(self):
        pass


class JsonFileStore(KeyValueStore):
    def __init__(self, path: str):
        super().__init__()
        self.path = path
        self.data.update(_load(path))

    def flush(self):
        _save(self.data, self.path)


def _save(obj, path):
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    tmp = path + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False)
    os.replace(tmp, path)


def _load(path) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as e:
        logger.warning("Could not read store %s (%s); starting empty", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Store %s does not hold an object; starting empty", path)
        return {}
    return data


# ────────────────────────────────────────────────────────────────────────────
# Record store
# ────────────────────────────────────────────────────────────────────────────
def _is_blank(record) -> bool:
    return not record or (isinstance(record, str) and not record.strip())


class RecordStore:
    """
    Ordered collections of records kept under string keys.

    Every mutation is one read-modify-write of the whole collection. Indices
    are 1-based, matching what the user sees in listings. Calendar days
    (``cal-YYMMDD`` keys) are tracked in a secondary index so that
    ``date_keys()`` never has to walk the whole store.
    """

    def __init__(self, kv: KeyValueStore):
        self.kv = kv
        if CAL_INDEX_KEY not in self.kv:
            self._rebuild_index()

    # --- reads ---
    def list(self, key: str) -> List[Any]:
        value = self.kv.get_list(key)
        return value if isinstance(value, list) else []

    def find_first(self, key: str, predicate: Callable[[Any], bool]) -> Optional[int]:
        for i, record in enumerate(self.list(key), 1):
            if predicate(record):
                return i
        return None

    def date_keys(self) -> List[str]:
        return sorted(self.list(CAL_INDEX_KEY))

    # --- writes ---
    def append(self, key: str, record):
        if _is_blank(record):
            raise EmptyContent()
        records = self.list(key)
        records.append(record)
        self._write(key, records)

    def replace_at(self, key: str, index, record):
        if isinstance(record, str) and not record.strip():
            raise EmptyContent()
        records = self.list(key)
        records[self._check_index(index, records) - 1] = record
        self._write(key, records)

    def remove_at(self, key: str, index):
        records = self.list(key)
        removed = records.pop(self._check_index(index, records) - 1)
        self._write(key, records)
        return removed

    def remove_where(self, key: str, predicate: Callable[[Any], bool]) -> List[Any]:
        records = self.list(key)
        kept = [r for r in records if not predicate(r)]
        removed = [r for r in records if predicate(r)]
        if removed:
            self._write(key, kept)
        return removed

    def replace_all(self, key: str, records: List[Any]):
        self._write(key, list(records))

    # --- internals ---
    @staticmethod
    def _check_index(index, records) -> int:
        if isinstance(index, bool) or not isinstance(index, int):
            raise IndexOutOfRange(f"Invalid index {index}.")
        if not 1 <= index <= len(records):
            raise IndexOutOfRange(f"Invalid index {index}.")
        return index

    def _write(self, key: str, records: List[Any]):
        self.kv.set_list(key, records)
        logger.debug("Wrote %d record(s) to %s", len(records), key)
        if key.startswith(CAL_PREFIX):
            self._track_day(key, bool(records))

    def _track_day(self, key: str, active: bool):
        days = set(self.list(CAL_INDEX_KEY))
        if active == (key in days):
            return
        if active:
            days.add(key)
        else:
            days.discard(key)
        self.kv.set_list(CAL_INDEX_KEY, sorted(days))

    def _rebuild_index(self):
        days = sorted(k for k in self.kv
                      if k.startswith(CAL_PREFIX) and self.list(k))
        self.kv.set_list(CAL_INDEX_KEY, days)
        logger.info("Rebuilt calendar index (%d day(s))", len(days))
