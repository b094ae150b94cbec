from __future__ import annotations

from dataclasses import dataclass, field

from .types import CAPABILITY, FEATURE, REQUIREMENT, THREAD, TRACKED_CATEGORIES


@dataclass(frozen=True)
class TypeTaxonomy:
    """Maps tracker issue-type and link names onto graph categories.

    Built once from configuration and only ever read afterwards.
    """

    capability_type: str
    feature_type: str
    requirement_type: str
    thread_type: str
    parent_link: str
    child_link: str
    traces_to_link: str
    traces_from_link: str
    depends_link_out: str
    depends_link_in: str
    process_prefix: str

    _categories: dict[str, str] = field(init=False, repr=False, compare=False)
    _tracked_links: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # Reverse precedence: capability wins over feature, thread, requirement.
        categories = {
            self.requirement_type: REQUIREMENT,
            self.thread_type: THREAD,
            self.feature_type: FEATURE,
            self.capability_type: CAPABILITY,
        }
        links = frozenset(
            name.lower()
            for name in (
                self.parent_link,
                self.child_link,
                self.traces_to_link,
                self.traces_from_link,
                self.depends_link_out,
                self.depends_link_in,
            )
        )
        object.__setattr__(self, "_categories", categories)
        object.__setattr__(self, "_tracked_links", links)

    def classify_issue_type(self, name: str) -> str:
        """Category for an issue-type name; unknown names pass through unchanged."""
        return self._categories.get(name, name)

    def is_tracked_category(self, category: str) -> bool:
        return category in TRACKED_CATEGORIES

    def is_tracked_issue_type(self, name: str) -> bool:
        return self.is_tracked_category(self.classify_issue_type(name))

    def is_tracked_link(self, name: str) -> bool:
        return (name or "").lower() in self._tracked_links

    def dependency_type_for(self, category: str) -> str:
        if category == REQUIREMENT:
            return self.traces_to_link
        return self.depends_link_out

    @property
    def default_dependency(self) -> str:
        return self.depends_link_out

    def is_process_label(self, label: str) -> tuple[bool, str]:
        """An empty prefix matches every label."""
        lowered = (label or "").lower()
        prefix = self.process_prefix.lower()
        if not lowered.startswith(prefix):
            return False, ""
        return True, lowered[len(prefix):]


def build_jql(projects: list[str], issue_types: list[str]) -> str:
    """Render the static-issue search query.

    >>> build_jql(["PIR"], ["A", "B"])
    "project = PIR AND issuetype in ('A','B')"

    Embedded quotes are not escaped.
    """
    if len(projects) == 1:
        jql = "project = " + projects[0]
    else:
        jql = "project IN (" + ",".join(projects) + ")"
    return jql + " AND issuetype in ('" + "','".join(issue_types) + "')"
