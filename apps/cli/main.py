"""CLI application for jsr-registry."""

import asyncio
import json
import logging

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from semantic_version import Version

from jsr_registry.config import DEFAULT_HOST, DEFAULT_NPM_COMP_HOST, FetcherConfig
from jsr_registry.errors import JsrRegistryError
from jsr_registry.fetcher import Fetcher
from jsr_registry.info import Info, MetaBuilder, PackageBuilder
from jsr_registry.models import Meta, NpmCompMeta, Package
from jsr_registry.npm_name import DEFAULT_PROVIDER_SCOPE

console = Console()

EXIT_ERROR = 1
EXIT_NOT_FOUND = 2


def setup_logging(verbose: bool) -> None:
    """Route library debug logs through rich when --verbose is given."""
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    # httpx logs full request URLs at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_fetcher(host: str, npm_host: str, provider_scope: str) -> Fetcher:
    config = FetcherConfig(host=host, npm_comp_host=npm_host, provider_scope=provider_scope)
    return Fetcher(config)


def format_meta(meta: Meta) -> str:
    """Format the version list of a package, marking yanked versions."""
    versions = []
    for version in sorted(meta.versions):
        label = str(version)
        if meta.versions[version].yanked:
            label += " (yanked)"
        versions.append(label)
    lines = [f"@{meta.scope}/{meta.name}"]
    lines.append(f"Versions: {', '.join(versions)}")
    lines.append(f"Latest: {meta.latest}")
    return "\n".join(lines)


def manifest_table(package: Package) -> Table:
    table = Table(title="Manifest")
    table.add_column("Path")
    table.add_column("Size", justify="right")
    table.add_column("Checksum")
    for path in sorted(package.manifest):
        entry = package.manifest[path]
        table.add_row(path, str(entry.size), entry.checksum)
    return table


def format_npm_meta(meta: NpmCompMeta) -> str:
    """Format the latest publish date and dependencies of the latest version."""
    latest = meta.dist_tags.latest
    published = meta.published_at(latest)
    lines = [f"{meta.name} {latest}"]
    if published is not None:
        lines.append(f"Latest version published: {published:%a, %d %b %Y %H:%M:%S %z}")
    else:
        lines.append("Latest version published: unknown")

    package = meta.latest_package()
    lines.append("Dependencies:")
    if package is None or not package.dependencies:
        lines.append("  (none)")
    else:
        for name, spec in sorted(package.dependencies.items()):
            lines.append(f"  {name} {spec.expression}")
    return "\n".join(lines)


def parse_name(text: str) -> MetaBuilder:
    try:
        info = Info.parse(text)
    except ValueError as e:
        raise typer.BadParameter(str(e))
    return MetaBuilder.from_info(info)


app = typer.Typer(
    name="jsr-registry",
    help="jsr-registry - Read package metadata from the JSR registry",
    add_completion=False,
)

HOST_OPTION = typer.Option(DEFAULT_HOST, "--host", envvar="JSR_HOST", help="Registry host")
NPM_HOST_OPTION = typer.Option(
    DEFAULT_NPM_COMP_HOST, "--npm-host", envvar="JSR_NPM_HOST", help="npm-compatible registry host"
)
PROVIDER_OPTION = typer.Option(
    DEFAULT_PROVIDER_SCOPE,
    "--provider-scope",
    envvar="JSR_PROVIDER_SCOPE",
    help="Scope hosting JSR packages on the npm-compatible registry",
)
JSON_OPTION = typer.Option(False, "--json", help="Print the decoded metadata as JSON")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Log requests")


@app.command()
def meta(
    package_name: str = typer.Argument(help="Package name, e.g. @std/path"),
    host: str = HOST_OPTION,
    npm_host: str = NPM_HOST_OPTION,
    provider_scope: str = PROVIDER_OPTION,
    as_json: bool = JSON_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show the published versions of a package."""
    setup_logging(verbose)
    info = parse_name(package_name)
    try:
        fetcher = build_fetcher(host, npm_host, provider_scope)
        result = asyncio.run(fetcher.fetch_meta(info))
    except (JsrRegistryError, ValidationError) as e:
        console.print(f"Error: {escape(str(e))}", style="red")
        raise typer.Exit(EXIT_ERROR)

    if result is None:
        console.print(f"Package {package_name} not found", style="red")
        raise typer.Exit(EXIT_NOT_FOUND)

    if as_json:
        console.print_json(json.dumps(result.to_json()))
    else:
        console.print(format_meta(result), highlight=False)


@app.command()
def package(
    package_name: str = typer.Argument(help="Package name, e.g. @std/path"),
    version: str | None = typer.Option(None, "--version", help="Version (defaults to latest)"),
    host: str = HOST_OPTION,
    npm_host: str = NPM_HOST_OPTION,
    provider_scope: str = PROVIDER_OPTION,
    as_json: bool = JSON_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show the files and exports of one package version."""
    setup_logging(verbose)
    info = parse_name(package_name)
    if version is not None:
        try:
            chosen = Version(version)
        except ValueError:
            raise typer.BadParameter(f"Invalid version {version!r}", param_hint="--version")

    try:
        fetcher = build_fetcher(host, npm_host, provider_scope)
        if version is None:
            found = asyncio.run(fetcher.fetch_meta(info))
            if found is None:
                console.print(f"Package {package_name} not found", style="red")
                raise typer.Exit(EXIT_NOT_FOUND)
            chosen = found.latest
        builder = PackageBuilder.from_info(info).set_version(chosen)
        result = asyncio.run(fetcher.fetch_version_manifest(builder))
    except (JsrRegistryError, ValidationError) as e:
        console.print(f"Error: {escape(str(e))}", style="red")
        raise typer.Exit(EXIT_ERROR)

    if result is None:
        console.print(f"Version {chosen} of {package_name} not found", style="red")
        raise typer.Exit(EXIT_NOT_FOUND)

    if as_json:
        console.print_json(json.dumps(result.to_json()))
        return

    console.print(f"{package_name}@{chosen}", highlight=False)
    console.print(manifest_table(result))
    console.print("Exports:")
    for key in sorted(result.exports):
        console.print(f"  {key} -> {result.exports[key]}", highlight=False)


@app.command("npm-meta")
def npm_meta(
    package_name: str = typer.Argument(help="Package name, e.g. @std/path"),
    host: str = HOST_OPTION,
    npm_host: str = NPM_HOST_OPTION,
    provider_scope: str = PROVIDER_OPTION,
    as_json: bool = JSON_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show the npm-compatible metadata of a package."""
    setup_logging(verbose)
    info = parse_name(package_name)
    try:
        fetcher = build_fetcher(host, npm_host, provider_scope)
        result = asyncio.run(fetcher.fetch_npm_comp_meta(info))
    except (JsrRegistryError, ValidationError) as e:
        console.print(f"Error: {escape(str(e))}", style="red")
        raise typer.Exit(EXIT_ERROR)

    if result is None:
        console.print(f"Package {package_name} not found", style="red")
        raise typer.Exit(EXIT_NOT_FOUND)

    if as_json:
        console.print_json(json.dumps(result.to_json()))
    else:
        console.print(format_npm_meta(result), highlight=False)


if __name__ == "__main__":
    app()
