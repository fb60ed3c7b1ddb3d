"""CLI entry point for method-catalog."""

import logging
from pathlib import Path

import click

from method_catalog.config import load_settings
from method_catalog.errors import CatalogError
from method_catalog.store.catalog import MethodCatalog
from method_catalog.store.dynamic import MemoryRepoRegistry
from method_catalog.store.source import DirectoryContentSource


def _open_catalog(content_dir: Path | None) -> MethodCatalog:
    """Open a local content directory, or clone the configured repository."""
    if content_dir is not None:
        return MethodCatalog(DirectoryContentSource(content_dir), dynamic_repos=MemoryRepoRegistry())
    return MethodCatalog.from_settings(load_settings())


@click.group()
@click.option("--log-level", default=None, help="Logging level (defaults to METHOD_CATALOG_LOG_LEVEL).")
def main(log_level: str | None):
    """Method Catalog: validate and browse method, app and type descriptions."""
    if log_level is None:
        try:
            log_level = load_settings().log_level
        except CatalogError as exc:
            raise click.ClickException(str(exc)) from exc
    logging.basicConfig(level=log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("content_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
def validate(content_dir: Path):
    """Load every entity under CONTENT_DIR and report the ones that fail."""
    try:
        catalog = _open_catalog(content_dir)
    except CatalogError as exc:
        raise click.ClickException(str(exc)) from exc
    index = catalog.get_categories_index()

    failures = []
    for kind, records in (
        ("category", index.get_categories()),
        ("method", index.get_methods()),
        ("app", index.get_apps()),
        ("type", index.get_types()),
    ):
        for entity_id, record in records.items():
            if record.loading_error is not None:
                failures.append((kind, entity_id, record.loading_error))

    for name, exc in catalog.get_dynamic_repo_loading_errors().items():
        failures.append(("module", name, str(exc)))

    click.echo(
        f"Loaded {len(index.get_methods())} methods, {len(index.get_apps())} apps, "
        f"{len(index.get_types())} types, {len(index.get_categories())} categories."
    )
    for kind, entity_id, error in failures:
        click.echo(f"  [{kind}] {entity_id}: {error}")
    if failures:
        click.get_current_context().exit(1)
    click.echo("No errors found.")


@main.command("list-methods")
@click.option("--content-dir", type=click.Path(exists=True, file_okay=False, path_type=Path), default=None, help="Local content directory instead of the configured repository.")
@click.option("--errors", "with_errors", is_flag=True, help="Include methods that failed to load.")
def list_methods(content_dir: Path | None, with_errors: bool):
    """Print the ids of all catalogued methods."""
    try:
        catalog = _open_catalog(content_dir)
    except CatalogError as exc:
        raise click.ClickException(str(exc)) from exc
    for method_id in catalog.list_method_ids(with_errors):
        click.echo(method_id)


@main.command("show-method")
@click.argument("method_id")
@click.option("--content-dir", type=click.Path(exists=True, file_okay=False, path_type=Path), default=None, help="Local content directory instead of the configured repository.")
@click.option("--view", default="spec", type=click.Choice(["brief", "full", "spec"]), help="Which record to print.")
def show_method(method_id: str, content_dir: Path | None, view: str):
    """Print one method record as JSON."""
    try:
        catalog = _open_catalog(content_dir)
        if view == "brief":
            record = catalog.get_method_brief_info(method_id)
        elif view == "full":
            record = catalog.get_method_full_info(method_id)
        else:
            record = catalog.get_method_spec(method_id)
    except CatalogError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(record.model_dump_json(indent=2, by_alias=True))
