"""Read-side facade over the catalog snapshot.

Every public read first lets the refresh controller poll the content source,
then answers from the category index or one of the read-through caches.
"""

import logging
import time
from collections.abc import Callable
from functools import partial
from pathlib import Path
from typing import TypeVar

from method_catalog.config import CatalogSettings
from method_catalog.errors import CatalogError, InitError, SchemaError, StoreError
from method_catalog.parser.app import error_app_brief, translate_app
from method_catalog.parser.base import (
    AppBriefInfo,
    AppData,
    AppFullInfo,
    AppSpec,
    MethodBriefInfo,
    MethodData,
    MethodFullInfo,
    MethodSpec,
    TypeInfo,
)
from method_catalog.parser.decode import decode_json, decode_yaml_map, read_json, read_yaml_map
from method_catalog.parser.lookup import CallableLookup, DirectoryLookup
from method_catalog.parser.method import error_method_brief, translate_method
from method_catalog.parser.types import error_type_info, translate_type
from method_catalog.store.cache import ReadThroughCache
from method_catalog.store.dynamic import (
    DynamicOverlay,
    DynamicRepoRegistry,
    GitRepoProvider,
    MemoryRepoRegistry,
    ProviderFactory,
)
from method_catalog.store.index import CatalogIndex
from method_catalog.store.refresh import RefreshController
from method_catalog.store.source import ContentSource, GitContentSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _list_dirs(path: Path) -> list[str]:
    if not path.is_dir():
        return []
    return sorted(p.name for p in path.iterdir() if p.is_dir())


def _error_record(exc: Exception, fallback: Callable[[str], T]) -> T:
    if isinstance(exc, SchemaError) and exc.brief is not None:
        return exc.brief
    return fallback(str(exc))


class MethodCatalog:
    """Catalog of methods, apps, types and categories backed by a content source.

    Construction initialises the source (a git source wipes and re-clones its
    snapshot directory) and builds the first index; failures raise InitError.
    """

    def __init__(
        self,
        source: ContentSource,
        refresh_minutes: float = 2,
        cache_size: int = 1000,
        dynamic_repos: DynamicRepoRegistry | None = None,
        temp_dir: Path | None = None,
        provider_factory: ProviderFactory = GitRepoProvider,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.overlay = (
            DynamicOverlay(dynamic_repos, provider_factory, temp_dir)
            if dynamic_repos is not None
            else None
        )
        self._index = CatalogIndex()
        self.method_full_info_cache: ReadThroughCache[str, MethodFullInfo] = ReadThroughCache(
            lambda method_id: self._load_method(method_id).full, cache_size
        )
        self.method_spec_cache: ReadThroughCache[str, MethodSpec] = ReadThroughCache(
            lambda method_id: self._load_method(method_id).spec, cache_size
        )
        self.app_full_info_cache: ReadThroughCache[str, AppFullInfo] = ReadThroughCache(
            lambda app_id: self._load_app(app_id).full, cache_size
        )
        self.app_spec_cache: ReadThroughCache[str, AppSpec] = ReadThroughCache(
            lambda app_id: self._load_app(app_id).spec, cache_size
        )
        self.refresher = RefreshController(source, refresh_minutes * 60, self._reload, clock)

        try:
            source.initialize()
            revision = source.current_revision()
            self._index = self._build_index()
        except InitError:
            raise
        except Exception as exc:
            msg = f"Cannot load catalog from {source.root}: {exc}"
            raise InitError(msg) from exc
        self.refresher.mark_loaded(revision)
        logger.info(
            "Catalog loaded",
            extra={
                "revision": revision,
                "methods": len(self._index.get_methods()),
                "apps": len(self._index.get_apps()),
            },
        )

    @classmethod
    def from_settings(cls, settings: CatalogSettings) -> "MethodCatalog":
        if not settings.repo_url:
            msg = "METHOD_CATALOG_REPO_URL is not set"
            raise InitError(msg)
        source = GitContentSource(
            settings.repo_url, settings.branch, settings.local_path, settings.pull_timeout
        )
        registry = MemoryRepoRegistry() if settings.dynamic_repos == "memory" else None
        return cls(
            source,
            refresh_minutes=settings.refresh_minutes,
            cache_size=settings.cache_size,
            dynamic_repos=registry,
            temp_dir=settings.temp_dir,
        )

    @property
    def caches(self) -> tuple[ReadThroughCache, ...]:
        return (
            self.method_full_info_cache,
            self.method_spec_cache,
            self.app_full_info_cache,
            self.app_spec_cache,
        )

    def check_for_changes(self) -> bool:
        return self.refresher.check_for_changes()

    def close(self) -> None:
        self.refresher.close()

    # index rebuild

    def _reload(self) -> None:
        self._index = self._build_index()
        for cache in self.caches:
            cache.invalidate_all()

    def _build_index(self) -> CatalogIndex:
        root = self.source.root
        if self.overlay is not None:
            self.overlay.load(root / "repositories")

        index = CatalogIndex()
        for category_id in _list_dirs(root / "categories"):
            try:
                spec = read_json(root / "categories" / category_id / "spec.json")
            except CatalogError as exc:
                logger.warning("Category %s failed to load: %s", category_id, exc)
                index.add_category_error(category_id, str(exc))
                continue
            index.add_or_update_category(category_id, spec)

        for method_id in self._list_method_ids_uncached():
            try:
                brief = self._load_method(method_id).brief
            except Exception as exc:
                logger.warning("Method %s failed to load: %s", method_id, exc)
                brief = _error_record(exc, partial(error_method_brief, method_id))
            index.add_or_update_method(method_id, brief)

        for app_id in _list_dirs(root / "apps"):
            try:
                app_brief = self._load_app(app_id).brief
            except Exception as exc:
                logger.warning("App %s failed to load: %s", app_id, exc)
                app_brief = _error_record(exc, partial(error_app_brief, app_id))
            index.add_or_update_app(app_id, app_brief)

        for type_name in _list_dirs(root / "types"):
            try:
                info = self._load_type(type_name)
            except Exception as exc:
                logger.warning("Type %s failed to load: %s", type_name, exc)
                info = _error_record(exc, partial(error_type_info, type_name))
            index.add_or_update_type(type_name, info)
        return index

    def _list_method_ids_uncached(self) -> list[str]:
        method_ids = _list_dirs(self.source.root / "methods")
        if self.overlay is not None:
            method_ids.extend(m for m in self.overlay.method_ids if m not in method_ids)
        return method_ids

    # uncached loaders

    def _load_method(self, method_id: str) -> MethodData:
        if self.overlay is not None and self.overlay.is_dynamic(method_id):
            provider, local_id = self.overlay.provider_for(method_id)
            spec = decode_json(provider.load_ui_narrative_method_spec(local_id))
            display = decode_yaml_map(provider.load_ui_narrative_method_display(local_id))
            lookup = CallableLookup(partial(provider.load_ui_narrative_method_file, local_id))
            return translate_method(method_id, spec, display, lookup)
        method_dir = self.source.root / "methods" / method_id
        return translate_method(
            method_id,
            read_json(method_dir / "spec.json"),
            read_yaml_map(method_dir / "display.yaml"),
            DirectoryLookup(method_dir),
        )

    def _load_app(self, app_id: str) -> AppData:
        app_dir = self.source.root / "apps" / app_id
        return translate_app(
            app_id,
            read_json(app_dir / "spec.json"),
            read_yaml_map(app_dir / "display.yaml"),
            DirectoryLookup(app_dir),
        )

    def _load_type(self, type_name: str) -> TypeInfo:
        type_dir = self.source.root / "types" / type_name
        return translate_type(
            type_name,
            read_json(type_dir / "spec.json"),
            read_yaml_map(type_dir / "display.yaml"),
            DirectoryLookup(type_dir),
        )

    def _cached(self, cache: ReadThroughCache[str, T], entity_id: str, what: str) -> T:
        try:
            return cache.get(entity_id)
        except CatalogError:
            raise
        except Exception as exc:
            msg = f"Error loading {what} id={entity_id} ({exc})"
            raise StoreError(msg) from exc

    def _require_method(self, method_id: str) -> MethodBriefInfo:
        brief = self._index.get_methods().get(method_id)
        if brief is None:
            msg = f"No method with id={method_id}"
            raise StoreError(msg)
        return brief

    def _require_app(self, app_id: str) -> AppBriefInfo:
        brief = self._index.get_apps().get(app_id)
        if brief is None:
            msg = f"No app with id={app_id}"
            raise StoreError(msg)
        return brief

    # public reads

    def list_method_ids(self, with_errors: bool = False) -> list[str]:
        self.check_for_changes()
        return [
            method_id
            for method_id, brief in self._index.get_methods().items()
            if with_errors or brief.loading_error is None
        ]

    def list_app_ids(self, with_errors: bool = False) -> list[str]:
        self.check_for_changes()
        return [
            app_id
            for app_id, brief in self._index.get_apps().items()
            if with_errors or brief.loading_error is None
        ]

    def list_type_names(self, with_errors: bool = False) -> list[str]:
        self.check_for_changes()
        return [
            type_name
            for type_name, info in self._index.get_types().items()
            if with_errors or info.loading_error is None
        ]

    def list_category_ids(self) -> list[str]:
        self.check_for_changes()
        return list(self._index.get_categories())

    def get_categories_index(self) -> CatalogIndex:
        self.check_for_changes()
        return self._index

    def get_method_brief_info(self, method_id: str) -> MethodBriefInfo:
        self.check_for_changes()
        return self._require_method(method_id)

    def get_method_full_info(self, method_id: str) -> MethodFullInfo:
        self.check_for_changes()
        self._require_method(method_id)
        return self._cached(self.method_full_info_cache, method_id, "full info for method")

    def get_method_spec(self, method_id: str) -> MethodSpec:
        self.check_for_changes()
        self._require_method(method_id)
        return self._cached(self.method_spec_cache, method_id, "spec for method")

    def get_app_brief_info(self, app_id: str) -> AppBriefInfo:
        self.check_for_changes()
        return self._require_app(app_id)

    def get_app_full_info(self, app_id: str) -> AppFullInfo:
        self.check_for_changes()
        self._require_app(app_id)
        return self._cached(self.app_full_info_cache, app_id, "full info for app")

    def get_app_spec(self, app_id: str) -> AppSpec:
        self.check_for_changes()
        self._require_app(app_id)
        return self._cached(self.app_spec_cache, app_id, "spec for app")

    def get_type_info(self, type_name: str) -> TypeInfo:
        self.check_for_changes()
        info = self._index.get_types().get(type_name)
        if info is None:
            msg = f"No type with name={type_name}"
            raise StoreError(msg)
        return info

    def get_revision(self) -> str | None:
        self.check_for_changes()
        return self.refresher.revision

    def get_dynamic_repo_loading_errors(self) -> dict[str, Exception]:
        self.check_for_changes()
        if self.overlay is None:
            return {}
        return dict(self.overlay.loading_errors)
