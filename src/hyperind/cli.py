import asyncio
import logging
import time
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.tree import Tree

from hyperind.constants import DEFAULT_DELAY_S, DEFAULT_STEP, HYPERMAP_ADDRESS, HYPERMAP_START_BLOCK, ROOT_HASH
from hyperind.core.config import BuildStateConfig
from hyperind.core.errors import FetchError
from hyperind.storage.state_file import read_state_file

console = Console()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _parse_block(value: str) -> int | str:
    return value if value.lower() in ("latest", "earliest", "genesis") else int(value)


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="warning",
    show_default=True,
)
def cli(log_level: str) -> None:
    """HyperInd: rebuild the Hypermap namespace from on-chain events."""
    _setup_logging(log_level)


@cli.command("build-state")
@click.option("--rpc", "rpc_url", required=True, envvar="HYPERIND_RPC_URL", help="RPC endpoint URL")
@click.option("--contract", default=HYPERMAP_ADDRESS, show_default=True, help="Hypermap contract address")
@click.option("--from-block", default=str(HYPERMAP_START_BLOCK), show_default=True)
@click.option("--to-block", default="latest", show_default=True)
@click.option("--step", type=int, default=DEFAULT_STEP, show_default=True, help="Blocks per request")
@click.option("--delay", type=float, default=DEFAULT_DELAY_S, show_default=True, help="Seconds to wait after each chunk")
@click.option("--timeout", type=int, default=20, show_default=True, help="Per-request timeout (s)")
@click.option("--out-dir", type=click.Path(file_okay=False, path_type=Path), default=Path("."), show_default=True)
@click.option("--manifest", "manifest_path", type=click.Path(dir_okay=False, path_type=Path), default=None, help="JSONL chunk journal")
@click.option("--events-out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write decoded events as Parquet")
def build_state_cmd(
    rpc_url: str,
    contract: str,
    from_block: str,
    to_block: str,
    step: int,
    delay: float,
    timeout: int,
    out_dir: Path,
    manifest_path: Path | None,
    events_out: Path | None,
) -> None:
    """Fetch all Hypermap events, rebuild the namespace and save it as JSON."""
    from hyperind.orchestration.orchestrator import build_state

    try:
        config = BuildStateConfig(
            rpc_url=rpc_url,
            address=contract,
            start_block=_parse_block(from_block),
            end_block=_parse_block(to_block),
            step=step,
            delay_s=delay,
            timeout_s=timeout,
            out_dir=out_dir,
            manifest_path=manifest_path,
            events_out=events_out,
        )
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold]indexing[/]"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn("•"),
        TimeElapsedColumn(),
        TextColumn(" • {task.description}"),
        console=console,
        transient=False,
        expand=True,
    )
    t0 = time.time()

    with progress:
        task = progress.add_task(description="Initializing...", total=None)
        first_block: list[int] = []

        def on_progress(current: int, total: int, message: str) -> None:
            if total and not first_block:
                first_block.append(current)
            if first_block:
                start = first_block[0]
                progress.update(task, total=total - start + 1, completed=current - start + 1)
            progress.update(task, description=message)

        try:
            output = asyncio.run(build_state(config=config, on_progress=on_progress))
        except (FetchError, ValueError) as e:
            raise click.ClickException(str(e)) from e

    stats = output.result.stats
    elapsed = time.time() - t0
    console.print(f"[bold]done[/]: {stats.raw_logs} logs • {elapsed:.2f}s")
    console.print(
        f"[bold]summary[/]: "
        f"[green]decoded[/]={stats.decoded}  "
        f"[yellow]unknown[/]={stats.unknown}  "
        f"[red]decode_failed[/]={stats.decode_failed}  "
        f"[red]processing_errors[/]={stats.processing_errors}  "
        f"entries={stats.entries_kept} (removed {stats.entries_removed})"
    )
    console.print(f"[bold]state[/]: {output.state_path}")
    if output.events_path is not None:
        console.print(f"[bold]events[/]: {output.events_path}")


# ---------------------------------------------------------------------------
# Viewing saved state
# ---------------------------------------------------------------------------


def _node_label(entry: dict[str, Any]) -> str:
    name = entry.get("fullName") or "(root)"
    owner = entry.get("owner")
    return f"[bold]{name}[/]" + (f"  [dim]{owner}[/]" if owner else "")


def _add_children(node: Tree, entry: dict[str, Any], state: dict[str, Any], depth: int, max_depth: int | None) -> None:
    if max_depth is not None and depth >= max_depth:
        return
    children = [state[h] for h in entry.get("children", []) if h in state]
    for child in sorted(children, key=lambda e: e.get("fullName", "")):
        _add_children(node.add(_node_label(child)), child, state, depth + 1, max_depth)


@cli.command("tree")
@click.argument("state_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--max-depth", type=int, default=None, help="Limit the rendered depth")
def tree_cmd(state_file: Path, max_depth: int | None) -> None:
    """Render a saved namespace state as a tree."""
    state = read_state_file(state_file)
    root = state.get(ROOT_HASH)
    if root is None:
        raise click.ClickException(f"{state_file} has no root entry")

    tree = Tree(_node_label(root))
    _add_children(tree, root, state, 0, max_depth)

    # entries whose parent is missing from the file
    orphans = [
        e for h, e in state.items()
        if h != ROOT_HASH and e.get("parentHash") not in state
    ]
    if orphans:
        branch = tree.add("[yellow](orphans)[/]")
        for e in sorted(orphans, key=lambda e: e.get("fullName", "")):
            _add_children(branch.add(_node_label(e)), e, state, 1, max_depth)

    console.print(tree)


def _find_entry(state: dict[str, Any], key: str) -> dict[str, Any] | None:
    if key.lower() in state:
        return state[key.lower()]
    for entry in state.values():
        if entry.get("fullName") == key:
            return entry
    return None


def _records_table(title: str, buckets: dict[str, list[dict[str, Any]]]) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("label")
    table.add_column("latest value")
    table.add_column("block", justify="right")
    table.add_column("history", justify="right")
    for label, records in sorted(buckets.items()):
        latest = records[0] if records else {}
        value = latest.get("value")
        table.add_row(
            label,
            str(value if value is not None else latest.get("rawBytes", "")),
            str(latest.get("blockNumber", "")),
            str(len(records)),
        )
    return table


@cli.command("inspect")
@click.argument("state_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("name_or_hash")
def inspect_cmd(state_file: Path, name_or_hash: str) -> None:
    """Show one entry, looked up by full name or namehash."""
    state = read_state_file(state_file)
    entry = _find_entry(state, name_or_hash)
    if entry is None:
        raise click.ClickException(f"no entry named {name_or_hash!r}")

    console.print(f"[bold]{entry.get('fullName') or '(root)'}[/]")
    for key in ("namehash", "parentHash", "owner", "gene", "creationBlock", "lastUpdateBlock"):
        console.print(f"  {key}: {entry.get(key)}")
    console.print(f"  children: {len(entry.get('children', []))}")
    if entry.get("notes"):
        console.print(_records_table("notes", entry["notes"]))
    if entry.get("facts"):
        console.print(_records_table("facts", entry["facts"]))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
