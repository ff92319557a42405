#!/usr/bin/env python3
"""
Main CLI Entry Point for pnode_analytics.

Fetches pods from the pRPC interface and presents the derived dataset:
- Filterable, sortable node listings
- Per-node detail with health factors
- Network-wide statistics and a health summary
"""

import asyncio
import json
import sys
import time
from pathlib import Path
from typing import Any

import click
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pnode_analytics.client.prpc_client import PRPCClient, PRPCError
from pnode_analytics.core.aggregator import (
    calculate_network_stats,
    network_health_summary,
    nodes_needing_attention,
    status_distribution,
    top_nodes,
    version_distribution,
)
from pnode_analytics.core.config import AnalyticsSettings
from pnode_analytics.core.filtering import NodeFilters, SortField, SortOrder, apply_filters
from pnode_analytics.core.formatting import (
    format_bytes,
    format_percent,
    format_relative_time,
    format_uptime,
    truncate_middle,
)
from pnode_analytics.core.health import (
    FleetContext,
    calculate_health_factors,
    health_score_label,
)
from pnode_analytics.core.logging import configure_logging
from pnode_analytics.core.normalizer import lookup_node, normalize_nodes
from pnode_analytics.core.statistics import NetworkHealthLevel
from pnode_analytics.datastructures.node_types import (
    AnnotatedNode,
    NodeStatus,
    RawNodeRecord,
)

console = Console()

CONFIG_ENV_VAR = "PNODE_ANALYTICS_CONFIG"

STATUS_STYLES = {
    NodeStatus.ONLINE: "[green]🟢 online[/green]",
    NodeStatus.DEGRADED: "[yellow]🟡 degraded[/yellow]",
    NodeStatus.OFFLINE: "[red]🔴 offline[/red]",
}

SUMMARY_STYLES = {
    NetworkHealthLevel.HEALTHY: "green",
    NetworkHealthLevel.WARNING: "yellow",
    NetworkHealthLevel.CRITICAL: "red",
}


def _health_style(score: int) -> str:
    if score >= 80:
        return f"[green]{score}[/green]"
    if score >= 60:
        return f"[yellow]{score}[/yellow]"
    if score >= 40:
        return f"[dark_orange]{score}[/dark_orange]"
    return f"[red]{score}[/red]"


def _load_settings(config: str | None) -> AnalyticsSettings:
    if config is None:
        return AnalyticsSettings()
    return AnalyticsSettings.from_path(Path(config))


def _client(ctx: click.Context) -> PRPCClient:
    settings: AnalyticsSettings = ctx.obj["settings"]
    return PRPCClient(settings=settings.prpc, endpoint=ctx.obj.get("endpoint"))


def _fetch_raw(ctx: click.Context) -> list[RawNodeRecord]:
    try:
        return asyncio.run(_client(ctx).fetch_all())
    except PRPCError as e:
        console.print(f"[red]❌ Failed to fetch pods: {e}[/red]")
        ctx.exit(1)


def _fetch(ctx: click.Context) -> list[AnnotatedNode]:
    settings: AnalyticsSettings = ctx.obj["settings"]
    return normalize_nodes(_fetch_raw(ctx), now=time.time(), config=settings.scoring)


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    envvar=CONFIG_ENV_VAR,
    help="Settings file (.toml or .json)",
)
@click.option("--endpoint", "-e", help="Query only this pRPC endpoint")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--debug-scope",
    "-d",
    "debug_scopes",
    multiple=True,
    help="Debug logging for one area: transport, scoring, cli or a module path",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: str | None,
    endpoint: str | None,
    verbose: bool,
    debug_scopes: tuple[str, ...],
):
    """
    pNode Analytics CLI.

    Health classification and network statistics for storage network pNodes.
    """
    try:
        settings = _load_settings(config)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--config") from e

    configure_logging(
        "DEBUG" if verbose else settings.log_level,
        debug_scopes=(*settings.log_debug_scopes, *debug_scopes),
    )
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["endpoint"] = endpoint


@cli.command()
@click.option(
    "--status",
    type=click.Choice(["all", *(status.value for status in NodeStatus)]),
    default="all",
    help="Only nodes in this status",
)
@click.option("--version", "version_filter", default="all", help="Only nodes on this version")
@click.option("--search", default="", help="Substring of pubkey, IP or address")
@click.option(
    "--sort-by",
    type=click.Choice([field.value for field in SortField]),
    default=SortField.HEALTH_SCORE.value,
    help="Sort field",
)
@click.option(
    "--order",
    type=click.Choice([order.value for order in SortOrder]),
    default=SortOrder.DESC.value,
    help="Sort direction",
)
@click.option("--limit", type=click.IntRange(min=0), default=0, help="Show at most N nodes (0 = all)")
@click.option(
    "--output",
    "-o",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.pass_context
def nodes(
    ctx: click.Context,
    status: str,
    version_filter: str,
    search: str,
    sort_by: str,
    order: str,
    limit: int,
    output: str,
):
    """List pNodes with filtering and sorting."""
    all_nodes = _fetch(ctx)
    filters = NodeFilters.from_mapping(
        {
            "status": status,
            "version": version_filter,
            "search": search,
            "sort_by": sort_by,
            "sort_order": order,
        }
    )
    selected = apply_filters(all_nodes, filters)
    if limit:
        selected = selected[:limit]

    if output == "json":
        _echo_json(
            {
                "nodes": [node.to_dict() for node in selected],
                "total": len(all_nodes),
                "filtered": len(selected),
            }
        )
        return

    now = time.time()
    table = Table(title=f"pNodes ({len(selected)} of {len(all_nodes)})")
    table.add_column("Pubkey", style="cyan", no_wrap=True)
    table.add_column("Address", style="blue")
    table.add_column("Status", justify="center")
    table.add_column("Health", justify="right")
    table.add_column("Version", style="magenta")
    table.add_column("Storage", justify="right")
    table.add_column("Uptime", justify="right")
    table.add_column("Last Seen", justify="right")

    for node in selected:
        table.add_row(
            truncate_middle(node.pubkey),
            node.address,
            STATUS_STYLES[node.status],
            _health_style(node.health_score),
            node.version or "-",
            f"{node.storage_used_formatted} / {node.storage_committed_formatted}",
            node.uptime_formatted,
            format_relative_time(node.last_seen_timestamp, now),
        )

    console.print(table)


@cli.command()
@click.argument("pubkey")
@click.option(
    "--output",
    "-o",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.pass_context
def node(ctx: click.Context, pubkey: str, output: str):
    """Show one pNode with its health factors."""
    settings: AnalyticsSettings = ctx.obj["settings"]
    raws = _fetch_raw(ctx)

    now = time.time()
    found = lookup_node(raws, pubkey, now=now, config=settings.scoring)
    if found is None:
        console.print(f"[red]❌ Node not found: {pubkey}[/red]")
        ctx.exit(1)

    fleet = FleetContext.from_records(raws, settings.scoring.pinned_version)
    factors = calculate_health_factors(
        found.raw, now=now, fleet=fleet, status=found.status, config=settings.scoring
    )

    if output == "json":
        _echo_json({"node": found.to_dict(), "health_factors": factors.to_dict()})
        return

    details = "\n".join(
        [
            f"[bold]Pubkey:[/bold] {found.pubkey}",
            f"[bold]Address:[/bold] {found.ip}:{found.gossip_port} (rpc {found.rpc_port})",
            f"[bold]Public:[/bold] {'yes' if found.is_public else 'no'}",
            f"[bold]Status:[/bold] {STATUS_STYLES[found.status]}",
            f"[bold]Health:[/bold] {_health_style(found.health_score)} "
            f"({health_score_label(found.health_score)})",
            f"[bold]Version:[/bold] {found.version or 'unknown'}",
            f"[bold]Storage:[/bold] {found.storage_used_formatted} / "
            f"{found.storage_committed_formatted}",
            f"[bold]Uptime:[/bold] {found.uptime_formatted}",
            f"[bold]Last seen:[/bold] {format_relative_time(found.last_seen_timestamp, now)}",
        ]
    )
    console.print(Panel(details, title="📡 pNode"))

    table = Table(title="Health Factors")
    table.add_column("Factor", style="cyan")
    table.add_column("Score", justify="right")
    for name, value in factors.to_dict().items():
        table.add_row(name, f"{value:.1f}")
    console.print(table)


@cli.command()
@click.option(
    "--output",
    "-o",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.option("--top", type=click.IntRange(min=0), default=5, help="Number of top nodes to show")
@click.pass_context
def stats(ctx: click.Context, output: str, top: int):
    """Show network-wide statistics."""
    settings: AnalyticsSettings = ctx.obj["settings"]
    raws = _fetch_raw(ctx)
    all_nodes = normalize_nodes(raws, now=time.time(), config=settings.scoring)

    network = calculate_network_stats(all_nodes)
    versions = version_distribution(all_nodes)
    statuses = status_distribution(all_nodes)
    best = top_nodes(all_nodes, top)
    fleet = FleetContext.from_records(raws, settings.scoring.pinned_version)
    attention = nodes_needing_attention(all_nodes, fleet)
    summary = network_health_summary(network)

    if output == "json":
        _echo_json(
            {
                "network": network.to_dict(),
                "version_distribution": [
                    {"version": v.version, "count": v.count, "percentage": v.percentage}
                    for v in versions
                ],
                "status_distribution": [
                    {"status": s.status.value, "count": s.count, "percentage": s.percentage}
                    for s in statuses
                ],
                "top_nodes": [n.to_dict() for n in best],
                "needs_attention": attention.counts(),
                "health_summary": {
                    "status": summary.level.value,
                    "message": summary.message,
                },
            }
        )
        return

    style = SUMMARY_STYLES[summary.level]
    overview = "\n".join(
        [
            f"[bold]Nodes:[/bold] {network.total_nodes} "
            f"([green]{network.online_nodes} online[/green], "
            f"[yellow]{network.degraded_nodes} degraded[/yellow], "
            f"[red]{network.offline_nodes} offline[/red])",
            f"[bold]Storage:[/bold] {format_bytes(network.total_storage_used)} / "
            f"{format_bytes(network.total_storage_committed)} "
            f"({format_percent(network.storage_utilization * 100)})",
            f"[bold]Average uptime:[/bold] {format_uptime(network.average_uptime)}",
            f"[bold]Average health:[/bold] {network.average_health_score:.1f}",
            f"[bold]Needs attention:[/bold] "
            + ", ".join(f"{k.replace('_', ' ')}={v}" for k, v in attention.counts().items()),
            f"[{style}]{summary.level.value.upper()}: {summary.message}[/{style}]",
        ]
    )
    console.print(Panel(overview, title="🌐 Network"))

    version_table = Table(title="Versions")
    version_table.add_column("Version", style="magenta")
    version_table.add_column("Nodes", justify="right")
    version_table.add_column("Share", justify="right")
    for share in versions:
        version_table.add_row(share.version or "-", str(share.count), format_percent(share.percentage))
    console.print(version_table)

    if best:
        top_table = Table(title=f"Top {len(best)} Nodes")
        top_table.add_column("Pubkey", style="cyan", no_wrap=True)
        top_table.add_column("Health", justify="right")
        top_table.add_column("Status", justify="center")
        for ranked in best:
            top_table.add_row(
                truncate_middle(ranked.pubkey),
                _health_style(ranked.health_score),
                STATUS_STYLES[ranked.status],
            )
        console.print(top_table)


def main():
    """Main CLI entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠️ Operation cancelled by user[/yellow]")
        sys.exit(1)
    except Exception as e:
        logger.exception("Unexpected error")
        console.print(f"[red]❌ Unexpected error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
