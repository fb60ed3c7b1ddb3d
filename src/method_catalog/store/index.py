"""Aggregate of brief records for every method, app, type and category."""

import logging
from typing import Any

from method_catalog.errors import SchemaError
from method_catalog.parser.base import AppBriefInfo, Category, MethodBriefInfo, TypeInfo
from method_catalog.parser.category import error_category, translate_category

logger = logging.getLogger(__name__)


class CatalogIndex:
    """Insertion-ordered maps of brief records.

    Entries that failed to load stay in the index with ``loading_error`` set;
    readers decide whether to show them.
    """

    def __init__(self):
        self._methods: dict[str, MethodBriefInfo] = {}
        self._apps: dict[str, AppBriefInfo] = {}
        self._types: dict[str, TypeInfo] = {}
        self._categories: dict[str, Category] = {}

    def add_or_update_category(
        self, category_id: str, spec: Any, display: dict[str, Any] | None = None
    ) -> Category:
        try:
            category = translate_category(category_id, spec, display)
        except SchemaError as exc:
            logger.warning("Category %s failed to load: %s", category_id, exc)
            category = exc.brief
        self._categories[category_id] = category
        return category

    def add_category_error(self, category_id: str, message: str) -> None:
        self._categories[category_id] = error_category(category_id, message)

    def add_or_update_method(self, method_id: str, brief: MethodBriefInfo) -> None:
        self._methods[method_id] = brief

    def add_or_update_app(self, app_id: str, brief: AppBriefInfo) -> None:
        self._apps[app_id] = brief

    def add_or_update_type(self, type_name: str, info: TypeInfo) -> None:
        self._types[type_name] = info

    def get_methods(self) -> dict[str, MethodBriefInfo]:
        return self._methods

    def get_apps(self) -> dict[str, AppBriefInfo]:
        return self._apps

    def get_types(self) -> dict[str, TypeInfo]:
        return self._types

    def get_categories(self) -> dict[str, Category]:
        return self._categories
