# cases.py: lenient test-case corpus loader
from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, List, Sequence, Tuple, Union

from models import AC, AD, BC, BD, InvalidItem, Item

Case = Tuple[Item, ...]

# Strings are matched first so comment markers inside them are left alone.
_TOKEN_RE = re.compile(r'"(?:\\.|[^"\\])*"|//[^\n]*|/\*.*?\*/|,(?=\s*[\]}])', re.S)

SENTINEL_ITEMS: Case = (
    Item(frozenset({AC})),
    Item(frozenset({AD})),
    Item(frozenset({BC})),
    Item(frozenset({BD})),
)


def _strip_lenient(text: str) -> str:
    def _sub(m: "re.Match[str]") -> str:
        tok = m.group(0)
        if tok.startswith('"'):
            return tok
        if tok.startswith("/*"):
            # keep line numbers stable for json error messages
            return "\n" * tok.count("\n")
        return ""

    # second pass drops commas that were only trailing once comments were gone
    return _TOKEN_RE.sub(_sub, _TOKEN_RE.sub(_sub, text))


def parse_cases(text: str) -> List[Case]:
    """
    Parse a corpus: a JSON array of cases, each an array of items, each an
    array of codes (0..3 or "AC".."BD").  Comments and trailing commas are
    accepted.
    """
    try:
        data: Any = json.loads(_strip_lenient(text))
    except json.JSONDecodeError as e:
        raise ValueError(f"Bad cases: {e}") from None

    if not isinstance(data, list):
        raise ValueError("Bad cases: expected a list of cases")

    out: List[Case] = []
    for ci, raw_case in enumerate(data):
        if not isinstance(raw_case, list):
            raise ValueError(f"Bad cases: case {ci} is not a list of items")
        items: List[Item] = []
        for ii, raw_item in enumerate(raw_case):
            if not isinstance(raw_item, list):
                raise InvalidItem(f"case {ci} item {ii}: expected a list of codes, got {raw_item!r}")
            try:
                items.append(Item.of(raw_item))
            except InvalidItem as e:
                raise InvalidItem(f"case {ci} item {ii}: {e}") from None
        out.append(tuple(items))
    return out


def load_cases(path: Union[str, Path]) -> List[Case]:
    with open(path, "r", encoding="utf-8") as fh:
        return parse_cases(fh.read())


def with_sentinels(case: Sequence[Item]) -> Case:
    return tuple(case) + SENTINEL_ITEMS


def case_to_raw(case: Sequence[Item]) -> List[List[str]]:
    return [list(item.sorted_codes()) for item in case]


__all__ = ["Case", "SENTINEL_ITEMS", "parse_cases", "load_cases", "with_sentinels", "case_to_raw"]
