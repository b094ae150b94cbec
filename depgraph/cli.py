import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich import print
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .extract import extract_and_save
from .integrity import IntegrityChecker, Policy
from .jira import TrackerError
from .serialize import load
from .settings import ConfigError, Settings
from .store import GraphStore
from .summary import histogram

app = typer.Typer(add_completion=False)


def _setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


def _settings(cfg: Optional[Path]) -> Settings:
    if cfg is not None and not cfg.exists():
        cfg = Path("config.json")
    if cfg is not None and cfg.exists():
        return Settings.load(cfg)
    return Settings()


def _prompt_missing(st: Settings) -> Settings:
    update = {}
    if not st.user:
        update["user"] = typer.prompt("Enter JIRA Username").strip()
    if not st.password:
        update["password"] = typer.prompt("Enter JIRA Password", hide_input=True)
    if not st.jira_url:
        update["jira_url"] = typer.prompt("Enter JIRA URL").strip()
    return st.model_copy(update=update)


@app.command()
def extract(
    cfg: Optional[Path] = typer.Option(None, "--cfg", help="Configuration file"),
    user: Optional[str] = typer.Option(None, help="JIRA user name"),
    password: Optional[str] = typer.Option(None, help="JIRA password"),
    url: Optional[str] = typer.Option(None, help="JIRA URL"),
    debug: bool = typer.Option(False, "--debug", help="Enable debugging mode"),
    out: Optional[str] = typer.Option(None, help="Output file"),
    policy: Optional[Policy] = typer.Option(None, help="What to do with edges whose endpoints are missing"),
):
    """Pull issues, components and sprints from JIRA and write the graph document."""
    load_dotenv()
    try:
        st = _settings(cfg)
    except ConfigError as exc:
        print(f"[red]ERROR[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    overrides = {"user": user, "password": password, "jira_url": url, "output_file": out,
                 "integrity_policy": policy.value if policy else None}
    st = st.model_copy(update={k: v for k, v in overrides.items() if v is not None})
    if debug:
        st = st.model_copy(update={"debug": True})
    if not st.valid():
        st = _prompt_missing(st)

    _setup_logging(st.debug)
    if st.debug:
        print(st.redacted())

    try:
        result = extract_and_save(st)
    except TrackerError as exc:
        print(f"[red]ERROR[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    d = result.diagnostics
    print(f"duplicates={len(d.duplicates)} unsound_edges={d.unsound_edges} "
          f"unrecognized_types={sum(d.unrecognized_types.values())} "
          f"untracked_links={sum(d.untracked_links.values())}")
    print("[green]Complete[/green]")


def _load(path: Path) -> GraphStore:
    try:
        return load(path)
    except (OSError, ValueError) as exc:
        print(f"[red]ERROR[/red] cannot read graph {escape(str(path))}: {escape(str(exc))}")
        raise typer.Exit(1)


@app.command()
def summary(path: Path):
    """Print node and edge counts by type for a saved graph."""
    store = _load(path)
    nodes, edges = histogram(store)
    for title, counts in (("Nodes", nodes), ("Edges", edges)):
        table = Table(title=f"{title} ({sum(counts.values())})")
        table.add_column("type")
        table.add_column("count", justify="right")
        for k, v in sorted(counts.items()):
            table.add_row(k or "(none)", str(v))
        print(table)


@app.command()
def check(path: Path):
    """Report edges in a saved graph that point at missing nodes."""
    _setup_logging(False)
    report = IntegrityChecker(_load(path)).run(Policy.REPORT)
    print(f"Good: {report.good}, Bad: {report.bad}")
    if report.bad:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
