from __future__ import annotations

from typing import Any


def escape_ldap_filter_value(value: str) -> str:
    """RFC 4515 escaping for LDAP filter values."""
    out: list[str] = []
    for ch in value:
        if ch == "\\":
            out.append("\\5c")
        elif ch == "*":
            out.append("\\2a")
        elif ch == "(":
            out.append("\\28")
        elif ch == ")":
            out.append("\\29")
        elif ch == "\x00":
            out.append("\\00")
        else:
            out.append(ch)
    return "".join(out)


def entry_attr_str(entry: dict, name: str) -> str:
    """First value of an attribute from a search entry dict, or ''."""
    v: Any = (entry.get("attributes") or {}).get(name)
    if isinstance(v, (list, tuple)):
        v = v[0] if v else ""
    return str(v or "")
