from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass
class Response:
    """One block of output. ``markup`` means ``text`` carries rich markup."""
    text: str
    category: str = "response"
    markup: bool = False
    rows: Optional[List[Tuple[str, str]]] = None

    def __str__(self): return self.text


def reply(text: str, category: str = "response", markup: bool = False) -> List[Response]:
    return [Response(text, category, markup)]


def error(message: str) -> Response:
    return Response(f"Error: {message}", "error")
