"""Command line interface: describe and diagnose claims and composites."""

import asyncio
import logging

import click
from rich.console import Console

from cp_graph.adapters import KubernetesAdapter
from cp_graph.builder import GraphBuilder
from cp_graph.config import Settings
from cp_graph.diagnose import diagnose as diagnose_tree
from cp_graph.diagnose import find_errors, find_unhealthy
from cp_graph.exceptions import BuildError, CPGraphError
from cp_graph.formatter import (
    DEFAULT_TABLE_FIELDS,
    DIAGNOSE_TABLE_FIELDS,
    build_findings_table,
    build_resource_table,
    format_tree_output,
)
from cp_graph.models import ResourceNode
from cp_graph.visualization import ALLOWED_FIELDS, DEFAULT_GRAPH_FIELDS, export_to_dot

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("cli", "graph", "dot", "json")


def setup_logging(log_level: str) -> None:
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _validate_fields(ctx: click.Context, param: click.Parameter, value: tuple[str, ...]):
    for field in value:
        if field.lower() not in ALLOWED_FIELDS:
            raise click.BadParameter(
                f"{field!r} is not one of {', '.join(ALLOWED_FIELDS)}", ctx=ctx, param=param
            )
    return tuple(field.lower() for field in value)


def _load_settings(
    namespace: str | None,
    kubeconfig: str | None,
    context: str | None,
    debug: bool,
) -> Settings:
    overrides: dict[str, object] = {}
    if namespace:
        overrides["namespace"] = namespace
    if kubeconfig:
        overrides["kubeconfig"] = kubeconfig
    if context:
        overrides["context"] = context
    if debug:
        overrides["log_level"] = "DEBUG"
    return Settings(**overrides)


async def _build_tree(
    settings: Settings,
    type_arg: str,
    name: str,
    fail_fast: bool = False,
) -> ResourceNode:
    client = KubernetesAdapter(settings)
    builder = GraphBuilder(client, settings.build_options(fail_fast=fail_fast))
    root = await builder.build(type_arg, name, settings.namespace)
    logger.debug(f"Build statistics: {builder.get_build_stats()}")
    return root


def _run_build(
    settings: Settings, type_arg: str, name: str, fail_fast: bool = False
) -> ResourceNode:
    try:
        return asyncio.run(_build_tree(settings, type_arg, name, fail_fast))
    except BuildError as e:
        raise click.ClickException(f"Error getting resource -> {e.message}") from e
    except CPGraphError as e:
        raise click.ClickException(
            f"Error getting resource {type_arg} {name!r} -> {e.message}"
        ) from e


def _report_errors(root: ResourceNode) -> None:
    for node in find_errors(root):
        click.echo(f"Warning: could not expand {node.node_id}: {node.error}", err=True)


@click.group()
def cli():
    """Inspect Crossplane claims and composites and the resources they manage."""


@cli.command()
@click.argument("type_arg", metavar="TYPE[.GROUP][/VERSION]")
@click.argument("name")
@click.option("--namespace", "-n", default=None, help="Namespace of the resource")
@click.option("--kubeconfig", "-k", default=None, help="Path to kubeconfig")
@click.option("--context", default=None, help="Kubeconfig context to use")
@click.option(
    "--output",
    "-o",
    type=click.Choice(OUTPUT_FORMATS),
    default="cli",
    show_default=True,
    help="Output format",
)
@click.option(
    "--fields",
    "-f",
    multiple=True,
    callback=_validate_fields,
    help=f"Field to show, repeatable ({', '.join(ALLOWED_FIELDS)})",
)
@click.option(
    "--path", "-p", default="graph.png", show_default=True, help="Output file for graph/dot"
)
@click.option("--fail-fast", is_flag=True, help="Abort on the first child that cannot be fetched")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def describe(
    type_arg, name, namespace, kubeconfig, context, output, fields, path, fail_fast, debug
):
    """
    Describe a claim or composite resource and all its children.

    Example:
        cp-graph describe objectstorage my-object-storage

        cp-graph describe xobjectstorage.my-fqdn.cloud/v1alpha1 my-object-storage -n my-namespace
    """
    settings = _load_settings(namespace, kubeconfig, context, debug)
    setup_logging(settings.log_level)

    root = _run_build(settings, type_arg, name, fail_fast)
    _report_errors(root)

    if output == "cli":
        Console().print(build_resource_table(root, fields or DEFAULT_TABLE_FIELDS))
    elif output == "json":
        click.echo(format_tree_output(root, "json"))
    elif output == "dot":
        export_to_dot(root, path, fields or DEFAULT_GRAPH_FIELDS)
        click.echo(f"Graph written to {path}")
    else:
        from cp_graph.visualization_graphviz import draw_resource_tree

        draw_resource_tree(root, path, fields or DEFAULT_GRAPH_FIELDS)
        click.echo(f"Graph written to {path}")


@cli.command()
@click.argument("type_arg", metavar="TYPE[.GROUP][/VERSION]")
@click.argument("name")
@click.option("--namespace", "-n", default=None, help="Namespace of the resource")
@click.option("--kubeconfig", "-k", default=None, help="Path to kubeconfig")
@click.option("--context", default=None, help="Kubeconfig context to use")
@click.option("--lineage", is_flag=True, help="Show each unhealthy resource with its path")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def diagnose(type_arg, name, namespace, kubeconfig, context, lineage, debug):
    """Diagnose a claim or composite resource and list unhealthy children."""
    settings = _load_settings(namespace, kubeconfig, context, debug)
    setup_logging(settings.log_level)

    root = _run_build(settings, type_arg, name)
    _report_errors(root)

    if lineage:
        findings = find_unhealthy(root)
        if not findings:
            click.echo(f"No issues found for resource {root.kind} {root.name}.")
            return
        click.echo("Identified the following resources as potentially unhealthy.")
        Console().print(build_findings_table(findings))
        return

    unhealthy = diagnose_tree(root)
    if unhealthy is None:
        click.echo(f"No issues found for resource {root.kind} {root.name}.")
        return

    click.echo("Identified the following resources as potentially unhealthy.")
    Console().print(build_resource_table(unhealthy, DIAGNOSE_TABLE_FIELDS))


def main() -> None:
    cli()
