"""Dynamic repositories: secondary sources whose methods join the catalog.

The primary content repository may carry a ``repositories`` manifest, one
repository per line::

    <repo-url> <user-id>[,<user-id>...]

Each repository is registered under its module name and its methods are
published as ``<module>/<method-id>``.
"""

import logging
import shutil
import tempfile
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

import git
import git.exc
import yaml

from method_catalog.errors import DynamicRepoError, SourceError

logger = logging.getLogger(__name__)

METHODS_SUBDIR = Path("ui") / "narrative" / "methods"


class RepoProvider(Protocol):
    def get_module_name(self) -> str: ...

    def get_git_commit_hash(self) -> str: ...

    def list_ui_narrative_method_ids(self) -> list[str]: ...

    def load_ui_narrative_method_spec(self, method_id: str) -> str: ...

    def load_ui_narrative_method_display(self, method_id: str) -> str: ...

    def load_ui_narrative_method_file(self, method_id: str, name: str) -> str | None: ...

    def close(self) -> None: ...


class DynamicRepoRegistry(Protocol):
    def register_repo(self, owner: str, provider: RepoProvider) -> None: ...

    def is_repo_registered(self, module_name: str) -> bool: ...

    def list_repo_owners(self, module_name: str) -> list[str]: ...

    def set_repo_owner(self, owner: str, module_name: str, user_id: str, is_owner: bool) -> None: ...

    def get_repo_details(self, module_name: str) -> RepoProvider: ...

    def list_repo_module_names(self) -> list[str]: ...


@dataclass
class _Registration:
    provider: RepoProvider
    owners: list[str] = field(default_factory=list)


class MemoryRepoRegistry:
    """Process-local registry of dynamic repositories."""

    def __init__(self):
        self._lock = threading.Lock()
        self._repos: dict[str, _Registration] = {}

    def register_repo(self, owner: str, provider: RepoProvider) -> None:
        module_name = provider.get_module_name()
        with self._lock:
            current = self._repos.get(module_name)
            if current is not None and owner not in current.owners:
                msg = f"User {owner} is not an owner of module {module_name}"
                raise DynamicRepoError(msg)
            owners = current.owners if current is not None else [owner]
            self._repos[module_name] = _Registration(provider=provider, owners=owners)

    def is_repo_registered(self, module_name: str) -> bool:
        with self._lock:
            return module_name in self._repos

    def list_repo_owners(self, module_name: str) -> list[str]:
        with self._lock:
            return list(self._get(module_name).owners)

    def set_repo_owner(self, owner: str, module_name: str, user_id: str, is_owner: bool) -> None:
        with self._lock:
            registration = self._get(module_name)
            if owner not in registration.owners:
                msg = f"User {owner} is not an owner of module {module_name}"
                raise DynamicRepoError(msg)
            if is_owner and user_id not in registration.owners:
                registration.owners.append(user_id)
            elif not is_owner and user_id in registration.owners:
                if len(registration.owners) == 1:
                    msg = f"Cannot remove the last owner of module {module_name}"
                    raise DynamicRepoError(msg)
                registration.owners.remove(user_id)

    def get_repo_details(self, module_name: str) -> RepoProvider:
        with self._lock:
            return self._get(module_name).provider

    def list_repo_module_names(self) -> list[str]:
        with self._lock:
            return sorted(self._repos)

    def _get(self, module_name: str) -> _Registration:
        registration = self._repos.get(module_name)
        if registration is None:
            msg = f"Module {module_name} is not registered"
            raise DynamicRepoError(msg)
        return registration


class GitRepoProvider:
    """Clones a module repository into the shared temp directory.

    The module name comes from ``kbase.yml``; method documents live under
    ``ui/narrative/methods/<id>/``.
    """

    def __init__(self, url: str, temp_dir: Path | None = None):
        self.url = url
        self.path = Path(tempfile.mkdtemp(prefix="repo_", dir=temp_dir))
        self._repo: git.Repo | None = None
        try:
            self._repo = git.Repo.clone_from(url, self.path)
            self._module_name = self._read_module_name()
        except git.exc.GitCommandError as exc:
            self.close()
            msg = f"Cannot clone dynamic repository {url}: {exc}"
            raise SourceError(msg) from exc
        except SourceError:
            self.close()
            raise

    def close(self) -> None:
        """Delete the clone; the provider must not be used afterwards."""
        if self._repo is not None:
            self._repo.close()
        shutil.rmtree(self.path, ignore_errors=True)

    def _read_module_name(self) -> str:
        manifest = self.path / "kbase.yml"
        try:
            data = yaml.safe_load(manifest.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            msg = f"Cannot read kbase.yml of {self.url}: {exc}"
            raise SourceError(msg) from exc
        if not isinstance(data, dict) or not data.get("module-name"):
            msg = f"kbase.yml of {self.url} has no module-name"
            raise SourceError(msg)
        return str(data["module-name"])

    def get_module_name(self) -> str:
        return self._module_name

    def get_git_commit_hash(self) -> str:
        return self._repo.head.commit.hexsha

    def list_ui_narrative_method_ids(self) -> list[str]:
        methods_dir = self.path / METHODS_SUBDIR
        if not methods_dir.is_dir():
            return []
        return sorted(p.name for p in methods_dir.iterdir() if p.is_dir())

    def load_ui_narrative_method_spec(self, method_id: str) -> str:
        return self._read(method_id, "spec.json")

    def load_ui_narrative_method_display(self, method_id: str) -> str:
        return self._read(method_id, "display.yaml")

    def load_ui_narrative_method_file(self, method_id: str, name: str) -> str | None:
        path = self.path / METHODS_SUBDIR / method_id / name
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Ignoring unreadable file %s: %s", path, exc)
            return None

    def _read(self, method_id: str, name: str) -> str:
        path = self.path / METHODS_SUBDIR / method_id / name
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Cannot read {name} of {self._module_name}/{method_id}: {exc}"
            raise SourceError(msg) from exc


def parse_manifest(text: str) -> list[tuple[str, list[str]]]:
    """Return ``(url, user_ids)`` for every usable manifest line."""
    entries = []
    for line in text.splitlines():
        parts = line.split()
        if len(parts) < 2:
            continue
        user_ids = [user for user in parts[1].split(",") if user]
        if not user_ids:
            continue
        entries.append((parts[0], user_ids))
    return entries


ProviderFactory = Callable[[str, Path | None], RepoProvider]


class DynamicOverlay:
    """Registers manifest repositories and lists their methods.

    Call :meth:`load` on every index rebuild; it replaces ``method_ids`` and
    ``loading_errors`` with freshly built collections.
    """

    def __init__(
        self,
        registry: DynamicRepoRegistry,
        provider_factory: ProviderFactory = GitRepoProvider,
        temp_dir: Path | None = None,
    ):
        self.registry = registry
        self.provider_factory = provider_factory
        self.temp_dir = temp_dir
        self.method_ids: list[str] = []
        self.loading_errors: dict[str, Exception] = {}

    def load(self, manifest_path: Path) -> None:
        if manifest_path.is_file():
            try:
                text = manifest_path.read_text(encoding="utf-8")
            except OSError as exc:
                msg = f"Cannot read {manifest_path}: {exc}"
                raise SourceError(msg) from exc
            for url, user_ids in parse_manifest(text):
                self._register(url, user_ids)

        method_ids: set[str] = set()
        loading_errors: dict[str, Exception] = {}
        for module_name in self.registry.list_repo_module_names():
            try:
                provider = self.registry.get_repo_details(module_name)
                for method_id in provider.list_ui_narrative_method_ids():
                    method_ids.add(f"{module_name}/{method_id}")
            except Exception as exc:
                logger.warning("Dynamic module %s failed to list methods: %s", module_name, exc)
                loading_errors[module_name] = exc
        self.method_ids = sorted(method_ids)
        self.loading_errors = loading_errors

    def _register(self, url: str, user_ids: list[str]) -> None:
        provider = self.provider_factory(url, self.temp_dir)
        try:
            module_name = provider.get_module_name()
            if not self.registry.is_repo_registered(module_name):
                owner = user_ids[0]
                self.registry.register_repo(owner, provider)
                logger.info("Registered dynamic module %s from %s", module_name, url)
                stale = None
            else:
                owner = self.registry.list_repo_owners(module_name)[0]
                current = self.registry.get_repo_details(module_name)
                if current.get_git_commit_hash() != provider.get_git_commit_hash():
                    self.registry.register_repo(owner, provider)
                    logger.info("Updated dynamic module %s", module_name)
                    stale = current
                else:
                    stale = provider
        except Exception:
            provider.close()
            raise
        # each rebuild clones afresh; only the registered clone stays on disk
        if stale is not None and stale is not self.registry.get_repo_details(module_name):
            stale.close()
        for user_id in user_ids:
            if user_id != owner:
                self.registry.set_repo_owner(owner, module_name, user_id, True)

    def is_dynamic(self, method_id: str) -> bool:
        return "/" in method_id

    def provider_for(self, method_id: str) -> tuple[RepoProvider, str]:
        """Split ``module/local-id`` and return the module's provider and the local id."""
        module_name, _, local_id = method_id.partition("/")
        return self.registry.get_repo_details(module_name), local_id
