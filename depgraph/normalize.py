from __future__ import annotations


def valid_id(raw: str | int | None) -> str:
    """Canonical graph key: every space becomes an underscore, nothing else changes."""
    if raw is None:
        return ""
    return str(raw).replace(" ", "_")


def composite_id(left: str | int, kind: str, right: str | int) -> str:
    # e.g. PIR-12_SPRINT_431
    return valid_id(f"{left}_{kind}_{right}")
