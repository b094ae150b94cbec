"""Read-only helpers over decoded tracker JSON.

Issues, links, sprints, boards and components arrive as plain dicts in the
shape the REST API returns them. Missing fields degrade to empty values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

Record = dict[str, Any]


def fields(issue: Record) -> Record:
    return issue.get("fields") or {}


def issue_key(issue: Record) -> str:
    return issue.get("key") or ""


def issue_type_name(issue: Record) -> str:
    return (fields(issue).get("issuetype") or {}).get("name") or ""


def issue_status(issue: Record) -> str:
    return (fields(issue).get("status") or {}).get("name") or ""


def component_names(issue: Record) -> list[str]:
    return [c.get("name") for c in fields(issue).get("components") or [] if c.get("name")]


def labels(issue: Record) -> list[str]:
    return list(fields(issue).get("labels") or [])


def issue_links(issue: Record) -> list[Record]:
    return list(fields(issue).get("issuelinks") or [])


def text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass
class LinkedIssue:
    issue: Record
    type_name: str
    link_label: str
    direction: int          # 1 inward, -1 outward

    @property
    def key(self) -> str:
        return issue_key(self.issue)

    @property
    def ident(self) -> str:
        return self.issue.get("id") or self.key


def linked(link: Record) -> LinkedIssue | None:
    """The issue on the far side of a link, or None when neither side is embedded."""
    link_type = link.get("type") or {}
    if link.get("inwardIssue"):
        issue = link["inwardIssue"]
        return LinkedIssue(issue, issue_type_name(issue), link_type.get("inward") or "", 1)
    if link.get("outwardIssue"):
        issue = link["outwardIssue"]
        return LinkedIssue(issue, issue_type_name(issue), link_type.get("outward") or "", -1)
    return None


def link_comment(link: Record) -> str:
    return text((link.get("comment") or {}).get("body"))
