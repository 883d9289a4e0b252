"""Unit tests for the git-backed version-control provider."""

from unittest.mock import Mock, patch

import pytest

from jdkpack.version import GitProvider, VersionControlError


def completed(stdout="", returncode=0, stderr=""):
    return Mock(returncode=returncode, stdout=stdout, stderr=stderr)


class TestGitProvider:
    """Tests for GitProvider with subprocess.run mocked."""

    @patch("jdkpack.version.vcs.subprocess.run")
    def test_list_tags(self, mock_run, tmp_path):
        mock_run.return_value = completed("jdk-17.0.2+8\n\njdk-17.0.1+12\n")

        tags = GitProvider(tmp_path).list_tags("jdk-17*")

        assert tags == ["jdk-17.0.2+8", "jdk-17.0.1+12"]
        assert mock_run.call_args.args[0] == ["git", "-C", str(tmp_path), "tag", "--list", "jdk-17*"]

    @patch("jdkpack.version.vcs.subprocess.run")
    def test_fetch_clears_stale_lock(self, mock_run, tmp_path):
        mock_run.return_value = completed()
        lock = tmp_path / ".git" / "shallow.lock"
        lock.parent.mkdir()
        lock.write_text("")

        GitProvider(tmp_path, fetch_args=["--depth=1"]).fetch_tags()

        assert not lock.exists()
        assert mock_run.call_args.args[0][-4:] == ["fetch", "-q", "--tags", "--depth=1"]

    @patch("jdkpack.version.vcs.subprocess.run")
    def test_failed_command_raises(self, mock_run, tmp_path):
        mock_run.return_value = completed(returncode=128, stderr="not a git repository")

        with pytest.raises(VersionControlError, match="not a git repository"):
            GitProvider(tmp_path).list_tags("*")

    @patch("jdkpack.version.vcs.subprocess.run")
    def test_queries_answer_none_on_failure(self, mock_run, tmp_path):
        mock_run.return_value = completed(returncode=128)
        provider = GitProvider(tmp_path)

        assert provider.current_commit_short_hash() is None
        assert provider.remote_url() is None
        assert provider.describe_tag() is None

    @patch("jdkpack.version.vcs.subprocess.run")
    def test_query_strips_output(self, mock_run, tmp_path):
        mock_run.return_value = completed("abc1234\n")

        assert GitProvider(tmp_path).current_commit_short_hash() == "abc1234"

    @patch("jdkpack.version.vcs.subprocess.run", side_effect=FileNotFoundError())
    def test_missing_git_executable(self, mock_run, tmp_path):
        with pytest.raises(VersionControlError, match="git executable not found"):
            GitProvider(tmp_path, git_executable="no-such-git").list_tags("*")
