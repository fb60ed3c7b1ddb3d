"""Content sources: where the catalog's on-disk snapshot comes from.

A source owns a local directory laid out as::

    methods/<id>/{spec.json,display.yaml,*.html}
    apps/<id>/{spec.json,display.yaml}
    types/<name>/{spec.json,display.yaml}
    categories/<id>/spec.json
    repositories

and tells the refresh controller when that directory changed.
"""

import hashlib
import logging
import shutil
from pathlib import Path
from typing import Protocol

import git
import git.exc

from method_catalog.errors import InitError, SourceError

logger = logging.getLogger(__name__)

UP_TO_DATE_MARKERS = ("Already up-to-date.", "Already up to date.")


def is_up_to_date(status: str | None) -> bool:
    return status is not None and status.strip().startswith(UP_TO_DATE_MARKERS)


class ContentSource(Protocol):
    root: Path

    def initialize(self) -> None: ...

    def pull(self) -> str | None: ...

    def current_revision(self) -> str: ...


class GitContentSource:
    """A git checkout of the content repository, kept current with ``git pull``."""

    def __init__(
        self,
        url: str,
        branch: str,
        local_path: Path,
        pull_timeout: float | None = None,
    ):
        self.url = url
        self.branch = branch
        self.root = Path(local_path)
        self.pull_timeout = pull_timeout
        self._repo: git.Repo | None = None

    @property
    def repo(self) -> git.Repo:
        if self._repo is None:
            try:
                self._repo = git.Repo(self.root)
            except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as exc:
                msg = f"{self.root} is not a clone of {self.url}"
                raise SourceError(msg) from exc
        return self._repo

    def initialize(self) -> None:
        """Delete any previous snapshot and clone afresh."""
        try:
            if self.root.exists():
                shutil.rmtree(self.root)
            self.root.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"Cannot clone {self.url}, error preparing directory: {exc}"
            raise InitError(msg) from exc
        try:
            self._repo = git.Repo.clone_from(self.url, self.root, branch=self.branch)
        except git.exc.GitCommandError as exc:
            msg = f"Cannot clone {self.url} (branch {self.branch}): {exc}"
            raise InitError(msg) from exc
        logger.info("Cloned %s", self.url, extra={"branch": self.branch, "path": str(self.root)})

    def pull(self) -> str | None:
        try:
            return self.repo.git.pull(kill_after_timeout=self.pull_timeout)
        except git.exc.GitCommandError as exc:
            msg = f"git pull of {self.url} failed: {exc}"
            raise SourceError(msg) from exc

    def current_revision(self) -> str:
        try:
            return self.repo.head.commit.hexsha
        except ValueError as exc:
            msg = f"Cannot read HEAD of {self.root}: {exc}"
            raise SourceError(msg) from exc


class DirectoryContentSource:
    """A plain directory; its revision is a fingerprint of file names, sizes and mtimes."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def initialize(self) -> None:
        if not self.root.is_dir():
            msg = f"Content directory {self.root} does not exist"
            raise InitError(msg)

    def pull(self) -> str | None:
        return None

    def current_revision(self) -> str:
        digest = hashlib.sha1()
        for path in sorted(p for p in self.root.rglob("*") if p.is_file()):
            stat = path.stat()
            digest.update(f"{path.relative_to(self.root)}:{stat.st_size}:{stat.st_mtime_ns}\n".encode())
        return digest.hexdigest()
