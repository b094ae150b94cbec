import pytest

from depgraph.builder import GraphBuilder
from depgraph.settings import Settings
from depgraph.store import GraphStore


def make_issue(key, type_name, *, summary="", components=(), labels=(), links=(), issue_id=None, **extra):
    fields = {
        "summary": summary or f"Summary of {key}",
        "issuetype": {"name": type_name},
        "components": [{"name": c} for c in components],
        "labels": list(labels),
        "issuelinks": list(links),
    }
    fields.update(extra)
    return {"id": issue_id or key.split("-")[-1], "key": key, "fields": fields}


def make_link(link_id, *, inward=None, outward=None, inward_label="is a child of",
              outward_label="is parent of", comment=None):
    link = {"id": link_id, "type": {"name": "Hierarchy", "inward": inward_label, "outward": outward_label}}
    if inward is not None:
        link["inwardIssue"] = inward
    if outward is not None:
        link["outwardIssue"] = outward
    if comment is not None:
        link["comment"] = {"body": comment}
    return link


def ref(key, type_name, issue_id=None):
    """Embedded issue reference as it appears inside a link."""
    return {"id": issue_id or key.split("-")[-1], "key": key, "fields": {"issuetype": {"name": type_name}}}


@pytest.fixture
def settings():
    return Settings(user="u", password="p", jira_url="https://jira.example.com")


@pytest.fixture
def taxonomy(settings):
    return settings.taxonomy()


@pytest.fixture
def store():
    return GraphStore()


@pytest.fixture
def builder(store, taxonomy):
    return GraphBuilder(store=store, taxonomy=taxonomy)
