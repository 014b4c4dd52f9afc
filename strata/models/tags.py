"""
Strata Models — tag mini-language parser.

A tag is a ``;``-separated list of items, each either a bare word or a
word followed by a parenthesised, comma-separated argument list::

    "name(user_id);ai"
    "len(20);unique(u_user_name);default(anonymous)"
    "fk(fk_group,groups,id,CASCADE)"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class Tag:
    name: str
    args: List[str] = field(default_factory=list)


def parse(tag: str) -> List[Tag]:
    """
    Parse a tag string.

    Empty items are skipped. Whitespace around names and arguments is
    stripped; the argument list is everything between the first ``(`` and
    the last ``)`` so expressions such as ``check(c_age,age > 0)`` survive.
    """
    items: List[Tag] = []
    for raw in tag.split(";"):
        raw = raw.strip()
        if not raw:
            continue

        start = raw.find("(")
        if start < 0:
            items.append(Tag(raw))
            continue

        end = raw.rfind(")")
        if end < start:
            end = len(raw)
        name = raw[:start].strip()
        body = raw[start + 1:end]
        args = [a.strip() for a in body.split(",")] if body.strip() else []
        items.append(Tag(name, args))

    return items


def get(tag: str, name: str) -> List[str] | None:
    """Arguments of the first item called ``name``, or None."""
    for item in parse(tag):
        if item.name == name:
            return item.args
    return None


def parse_bool(value: str) -> bool:
    v = value.strip().lower()
    if v in ("true", "1", "yes", "on", "t"):
        return True
    if v in ("false", "0", "no", "off", "f"):
        return False
    raise ValueError(f"invalid boolean {value!r}")


__all__ = ["Tag", "parse", "get", "parse_bool"]
