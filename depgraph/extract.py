from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from .builder import Diagnostics, GraphBuilder
from .integrity import IntegrityChecker, IntegrityReport
from .jira import STATIC_FIELDS, JiraClient
from .records import Record
from .serialize import save
from .settings import Settings
from .store import GraphStore
from .summary import log_summary
from .taxonomy import build_jql
from .timing import timed

log = logging.getLogger(__name__)


class Tracker(Protocol):
    def get_components(self, project: str) -> list[Record]: ...
    def iter_static_issue_pages(self, jql: str, page_size: int, fields: list[str]): ...
    def iter_boards(self, project: str, page_size: int = 100): ...
    def get_sprints(self, board_id: int | str) -> list[Record]: ...
    def get_sprint_issues(self, sprint_id: int | str) -> list[Record]: ...


@dataclass
class ExtractionResult:
    store: GraphStore
    diagnostics: Diagnostics
    integrity: IntegrityReport


@dataclass
class Extractor:
    settings: Settings
    client: Tracker
    builder: GraphBuilder

    @property
    def store(self) -> GraphStore:
        return self.builder.store

    def load_components(self) -> None:
        with timed("Load Components"):
            for project in self.settings.projects:
                self.builder.ingest_components(self.client.get_components(project))

    def load_static_issues(self) -> None:
        jql = build_jql(self.settings.projects, self.settings.issue_types())
        fields = STATIC_FIELDS + [self.settings.thread_finish_field]
        with timed("Load Static Issues"):
            for page in self.client.iter_static_issue_pages(jql, self.settings.page_size, fields):
                if page.get("startAt", 0) == 0:
                    log.info("Identified Total %d Issues", page.get("total", 0))
                self.builder.ingest_static_issues(page.get("issues") or [])
        log.info("Graph contains %d Items", len(self.store))

    def collect_sprints(self) -> dict[str, Record]:
        """Sprints of every non-kanban board, keyed by id."""
        sprints: dict[str, Record] = {}
        with timed("Get Boards"):
            for project in self.settings.projects:
                for board in self.client.iter_boards(project, self.settings.page_size):
                    if board.get("type") == "kanban":
                        log.debug("Skipping Board: %s Type: %s ID: %s", board.get("name"), board.get("type"), board.get("id"))
                        continue
                    log.debug("Board: %s Type: %s ID: %s", board.get("name"), board.get("type"), board.get("id"))
                    for sprint in self.client.get_sprints(board["id"]):
                        log.debug("Sprint: %s", sprint.get("name"))
                        sprints[str(sprint.get("id"))] = sprint
        return sprints

    def load_sprints(self) -> None:
        sprints = self.collect_sprints()
        log.info("%d Scrum Sprints Found", len(sprints))
        for sprint in sprints.values():
            self.builder.ingest_sprint(sprint)
            issues = self.client.get_sprint_issues(sprint["id"])
            log.info("Loading %d issues for Sprint %s", len(issues), sprint.get("name"))
            for issue in issues:
                self.builder.ingest_sprint_issue(sprint, issue)

    def run(self) -> ExtractionResult:
        self.load_components()
        self.load_static_issues()
        self.load_sprints()

        integrity = IntegrityChecker(self.store).run(self.settings.integrity_policy)
        self.builder.diagnostics.unsound_edges = integrity.bad
        log_summary(self.store)
        return ExtractionResult(self.store, self.builder.diagnostics, integrity)


def run_extraction(settings: Settings, client: Tracker | None = None) -> ExtractionResult:
    """Pull everything from the tracker and build the graph.

    Tracker failures propagate; nothing is saved.
    """
    owned = client is None
    if owned:
        client = JiraClient(settings.jira_url, settings.user, settings.password, debug=settings.debug)
    builder = GraphBuilder(
        store=GraphStore(),
        taxonomy=settings.taxonomy(),
        thread_finish_field=settings.thread_finish_field,
        debug=settings.debug,
    )
    try:
        return Extractor(settings, client, builder).run()
    finally:
        if owned:
            client.close()


def extract_and_save(settings: Settings, client: Tracker | None = None) -> ExtractionResult:
    result = run_extraction(settings, client)
    save(result.store, settings.output_file)
    return result
