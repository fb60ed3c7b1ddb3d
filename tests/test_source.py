from unittest.mock import MagicMock, patch

import git.exc
import pytest

from method_catalog.errors import InitError, SourceError
from method_catalog.store.source import DirectoryContentSource, GitContentSource


class TestGitContentSource:
    @patch("method_catalog.store.source.git.Repo.clone_from")
    def test_initialize_wipes_and_clones(self, mock_clone, tmp_path):
        local = tmp_path / "specs"
        local.mkdir()
        (local / "stale.txt").write_text("old")
        source = GitContentSource("https://example.org/specs.git", "dev", local)

        source.initialize()

        assert not (local / "stale.txt").exists()
        mock_clone.assert_called_once_with("https://example.org/specs.git", local, branch="dev")

    @patch("method_catalog.store.source.git.Repo.clone_from")
    def test_clone_failure_is_init_error(self, mock_clone, tmp_path):
        mock_clone.side_effect = git.exc.GitCommandError("clone", 128)
        source = GitContentSource("https://example.org/specs.git", "master", tmp_path / "specs")
        with pytest.raises(InitError):
            source.initialize()

    @patch("method_catalog.store.source.git.Repo.clone_from")
    def test_pull_and_revision(self, mock_clone, tmp_path):
        repo = MagicMock()
        repo.git.pull.return_value = "Already up to date."
        repo.head.commit.hexsha = "abc123"
        mock_clone.return_value = repo
        source = GitContentSource("u", "master", tmp_path / "specs", pull_timeout=30)
        source.initialize()

        assert source.pull() == "Already up to date."
        repo.git.pull.assert_called_once_with(kill_after_timeout=30)
        assert source.current_revision() == "abc123"

    @patch("method_catalog.store.source.git.Repo.clone_from")
    def test_pull_failure_is_source_error(self, mock_clone, tmp_path):
        repo = MagicMock()
        repo.git.pull.side_effect = git.exc.GitCommandError("pull", 1)
        mock_clone.return_value = repo
        source = GitContentSource("u", "master", tmp_path / "specs")
        source.initialize()
        with pytest.raises(SourceError):
            source.pull()

    def test_unusable_parent_is_init_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        source = GitContentSource("u", "master", blocker / "specs")
        with pytest.raises(InitError):
            source.initialize()


class TestDirectoryContentSource:
    def test_missing_directory(self, tmp_path):
        with pytest.raises(InitError):
            DirectoryContentSource(tmp_path / "nope").initialize()

    def test_revision_tracks_changes(self, tmp_path):
        (tmp_path / "a.json").write_text("{}")
        source = DirectoryContentSource(tmp_path)
        first = source.current_revision()
        assert source.current_revision() == first
        (tmp_path / "b.json").write_text("{}")
        assert source.current_revision() != first
        assert source.pull() is None
