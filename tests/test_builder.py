import logging

from conftest import make_issue, make_link, ref


def _edges(store):
    return {e.id: e for e in store.edges()}


class TestComponents:
    def test_ingest_components(self, builder, store):
        builder.ingest_components([
            {"name": "User Interface", "description": "Screens"},
            {"name": "Backend"},
            {"name": "User Interface"},
        ])
        assert len(store) == 2
        node = store.get("User_Interface")
        assert node.type == "component"
        assert node.label == "User Interface"
        assert node.description == "Screens"
        assert builder.diagnostics.duplicates == []


class TestStaticIssues:
    def test_feature_with_component(self, builder, store):
        builder.ingest_static_issues([make_issue("PIR-1", "New Feature", components=["UI"])])
        nodes = list(store.nodes())
        edges = list(store.edges())
        assert sorted(n.id for n in nodes) == ["PIR-1", "UI"]
        assert len(edges) == 1
        edge = edges[0]
        assert (edge.id, edge.source, edge.target, edge.type) == ("PIR-1_COMPONENT_UI", "PIR-1", "UI", "depends on")
        assert store.get("PIR-1").component == "UI"
        assert store.get("PIR-1").type == "feature"

    def test_component_reused(self, builder, store):
        builder.ingest_components([{"name": "UI", "description": "from project"}])
        builder.ingest_static_issues([make_issue("PIR-1", "New Feature", components=["UI"])])
        assert store.get("UI").description == "from project"
        assert builder.diagnostics.duplicates == []

    def test_link_seen_from_both_sides_added_once(self, builder, store):
        parent = make_issue("PIR-1", "New Capability", links=[
            make_link("900", inward=ref("PIR-2", "New Feature")),
        ])
        child = make_issue("PIR-2", "New Feature", links=[
            make_link("900", outward=ref("PIR-1", "New Capability")),
        ])
        builder.ingest_static_issues([parent, child])
        edges = _edges(store)
        assert list(edges) == ["900"]
        edge = edges["900"]
        # inward side is the linked issue, the issue itself fills the other end
        assert (edge.source, edge.target) == ("PIR-1", "PIR-2")
        assert edge.type == "is a child of"
        assert (edge.source_type, edge.target_type) == ("capability", "feature")
        assert builder.diagnostics.duplicates == []

    def test_outward_link(self, builder, store):
        issue = make_issue("PIR-5", "Requirement", links=[
            make_link("901", outward=ref("PIR-6", "Thread"), outward_label="traces to", comment="why"),
        ])
        builder.ingest_static_issues([issue])
        edge = store.get("901")
        assert (edge.source, edge.target, edge.type) == ("PIR-6", "PIR-5", "traces to")
        assert edge.description == "why"

    def test_untracked_link_skipped(self, builder, store):
        issue = make_issue("PIR-1", "New Feature", links=[
            make_link("902", inward=ref("PIR-2", "New Feature"), inward_label="relates to"),
        ])
        builder.ingest_static_issues([issue])
        assert list(store.edges()) == []
        assert builder.diagnostics.untracked_links == {"relates to": 1}

    def test_link_to_untracked_type_skipped(self, builder, store):
        issue = make_issue("PIR-1", "New Feature", links=[
            make_link("903", inward=ref("PIR-9", "Bug")),
        ])
        builder.ingest_static_issues([issue])
        assert list(store.edges()) == []

    def test_unrecognized_type_passes_through(self, builder, store):
        builder.ingest_static_issues([make_issue("PIR-3", "Bug")])
        assert store.get("PIR-3").type == "Bug"
        assert builder.diagnostics.unrecognized_types == {"Bug": 1}

    def test_thread_finish_date(self, builder, store):
        builder.ingest_static_issues([
            make_issue("PIR-4", "Thread", customfield_13008="2024-05-01"),
            make_issue("PIR-7", "New Feature", customfield_13008="2024-05-01"),
        ])
        assert store.get("PIR-4").finish_date == "2024-05-01"
        assert store.get("PIR-7").finish_date == ""

    def test_missing_fields_tolerated(self, builder, store):
        builder.ingest_static_issues([{"key": "PIR-8"}])
        node = store.get("PIR-8")
        assert node.label == "" and node.component == ""


class TestSprints:
    sprint = {"id": 42, "name": "Sprint 42", "state": "active",
              "startDate": "2024-01-01T00:00:00.000Z", "endDate": "2024-01-14T00:00:00.000Z"}

    def test_sprint_node(self, builder, store):
        builder.ingest_sprint(self.sprint)
        node = store.get("42")
        assert node.type == "sprint"
        assert node.label == "Sprint 42"
        assert node.status == "active"
        assert node.start_date.startswith("2024-01-01")
        assert node.finish_date.startswith("2024-01-14")

    def test_sprint_without_dates(self, builder, store):
        builder.ingest_sprint({"id": 7, "name": "Seven"})
        assert store.get("7").start_date == ""

    def test_direct_edge(self, builder, store):
        builder.ingest_sprint_issue(self.sprint, make_issue("PIR-1", "Requirement"))
        edge = store.get("PIR-1_SPRINT_42")
        assert (edge.source, edge.target, edge.type) == ("42", "PIR-1", "traces to")
        assert edge.description == "Issue PIR-1"

    def test_untracked_issue_has_no_direct_edge(self, builder, store):
        builder.ingest_sprint_issue(self.sprint, make_issue("PIR-1", "Bug"))
        assert list(store.edges()) == []

    def test_same_composite_key_appends_description(self, builder, store):
        builder.ingest_sprint_issue(self.sprint, make_issue("PIR 1", "New Feature"))
        builder.ingest_sprint_issue(self.sprint, make_issue("PIR_1", "New Feature"))
        edges = list(store.edges())
        assert len(edges) == 1
        assert edges[0].description == "Issue PIR 1\nIssue PIR_1"
        assert builder.diagnostics.duplicates == []

    def test_linked_issue_edge(self, builder, store):
        issue = make_issue("PIR-2", "Bug", links=[
            make_link("77", outward=ref("PIR-9", "New Capability", issue_id="10009"), outward_label="depends on"),
        ])
        builder.ingest_sprint_issue(self.sprint, issue)
        edge = store.get("10009_SPRINT_42")
        assert (edge.source, edge.target, edge.type) == ("42", "PIR-9", "depends on")
        assert edge.description == "Issue PIR-2 link PIR-9"

    def test_process_label_edge(self, builder, store):
        sprint = self.sprint
        builder.ingest_sprint_issue(sprint, make_issue("PIR-1", "Bug", labels=["Process_Code Review"]))
        builder.ingest_sprint_issue(sprint, make_issue("PIR-2", "Bug", labels=["process_code review"]))
        edge = store.get("code_review_SPRINT_42")
        assert edge.target == "code_review"
        assert edge.type == "depends on"
        assert edge.target_type == "process"
        assert edge.description.splitlines() == [
            "Issue PIR-1 process label Process_Code Review",
            "Issue PIR-2 process label process_code review",
        ]


class TestDiagnosticsLogging:
    def test_unrecognized_type_and_untracked_link_logged_once(self, builder, caplog):
        issue = make_issue("PIR-1", "Bug", links=[
            make_link("904", inward=ref("PIR-2", "New Feature"), inward_label="relates to"),
        ])
        with caplog.at_level(logging.INFO, logger="depgraph.builder"):
            builder.ingest_static_issues([issue, make_issue("PIR-3", "Bug")])
        messages = [r.getMessage() for r in caplog.records]
        assert sum("Unrecognized issue type 'Bug'" in m for m in messages) == 1
        assert any("untracked link type 'relates to'" in m for m in messages)
        assert builder.diagnostics.unrecognized_types == {"Bug": 2}
        assert builder.diagnostics.untracked_links == {"relates to": 1}
