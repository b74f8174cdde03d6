import re
from typing import List

# a quoted span, or a run of non-space non-quote characters; a stray opening
# quote sticks to the run that follows it
TOKEN_RE = re.compile(r'"[^"]+"|"?[^"\s]+')


def parse(line: str) -> List[str]:
    """
    Split a command line into arguments.

    ``'add "a b" c'`` -> ``['add', 'a b', 'c']``. An unterminated quote is not
    an error: ``'a "b'`` -> ``['a', '"b']``.
    """
    tokens = []
    for match in TOKEN_RE.finditer(line or ""):
        tok = match.group(0)
        if len(tok) > 1 and tok.startswith('"') and tok.endswith('"'):
            tok = tok[1:-1]
        tokens.append(tok)
    return tokens
