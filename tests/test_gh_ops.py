"""Tests for gh PR metadata fetching and parsing."""

import json
import subprocess
from unittest.mock import patch

import pytest

from prworktree.errors import MetadataParseFailed, MissingDependency, PRFetchFailed
from prworktree.gh_ops import (
    PR_FIELDS,
    GhCommandError,
    check_gh_installed,
    get_pr_metadata,
    parse_pr_metadata,
    run_gh,
)
from prworktree.model import PRMetadata


def _response(**overrides):
    data = {
        "headRefName": "feature-x",
        "headRepository": {"id": "R_1", "name": "repo"},
        "headRepositoryOwner": {"id": "U_1", "login": "alice"},
        "baseRefName": "main",
    }
    data.update(overrides)
    return data


def _completed(stdout="", returncode=0, stderr=""):
    return subprocess.CompletedProcess(["gh"], returncode, stdout=stdout, stderr=stderr)


class TestParsePrMetadata:

    def test_parses_required_fields(self):
        assert parse_pr_metadata(_response()) == PRMetadata("feature-x", "alice", "repo", "main")

    def test_base_branch_is_optional(self):
        meta = parse_pr_metadata(_response(baseRefName=None))
        assert meta.base_ref_name is None

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_head_ref_absent_null_or_empty(self, value):
        with pytest.raises(MetadataParseFailed, match="headRefName"):
            parse_pr_metadata(_response(headRefName=value))

    def test_head_ref_missing_key(self):
        data = _response()
        del data["headRefName"]
        with pytest.raises(MetadataParseFailed) as exc_info:
            parse_pr_metadata(data)
        assert exc_info.value.field == "headRefName"

    def test_deleted_fork_repository(self):
        # gh reports a deleted head repository as null
        with pytest.raises(MetadataParseFailed) as exc_info:
            parse_pr_metadata(_response(headRepository=None))
        assert exc_info.value.field == "headRepository.name"

    def test_owner_login_missing(self):
        with pytest.raises(MetadataParseFailed) as exc_info:
            parse_pr_metadata(_response(headRepositoryOwner={"id": "U_1"}))
        assert exc_info.value.field == "headRepositoryOwner.login"

    def test_literal_null_string_is_a_value(self):
        meta = parse_pr_metadata(_response(headRefName="null"))
        assert meta.head_ref_name == "null"


class TestGetPrMetadata:

    def test_runs_gh_pr_view(self):
        with patch("prworktree.gh_ops.run_gh", return_value=_completed(json.dumps(_response()))) as mock_gh:
            meta = get_pr_metadata("123", cwd="/work/repo")

        mock_gh.assert_called_once_with("pr", "view", "123", "--json", PR_FIELDS, cwd="/work/repo")
        assert meta.head_owner == "alice"

    def test_gh_failure(self):
        error = GhCommandError(("pr", "view", "789"), "GraphQL: Could not resolve to a PullRequest")
        with patch("prworktree.gh_ops.run_gh", side_effect=error):
            with pytest.raises(PRFetchFailed) as exc_info:
                get_pr_metadata("789")

        assert exc_info.value.pr_number == "789"
        assert "Could not resolve" in str(exc_info.value)

    def test_invalid_json(self):
        with patch("prworktree.gh_ops.run_gh", return_value=_completed("not json")):
            with pytest.raises(PRFetchFailed):
                get_pr_metadata("1")

    def test_non_object_json(self):
        with patch("prworktree.gh_ops.run_gh", return_value=_completed("[]")):
            with pytest.raises(PRFetchFailed):
                get_pr_metadata("1")


class TestRunGh:

    def test_non_zero_exit_raises(self):
        with patch("prworktree.gh_ops.subprocess.run", return_value=_completed(returncode=1, stderr="no auth\n")):
            with pytest.raises(GhCommandError) as exc_info:
                run_gh("pr", "view", "1")
        assert exc_info.value.stderr == "no auth"

    def test_unchecked_returns_result(self):
        with patch("prworktree.gh_ops.subprocess.run", return_value=_completed(returncode=1)):
            assert run_gh("auth", "status", check=False).returncode == 1

    def test_missing_executable(self):
        with patch("prworktree.gh_ops.subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(MissingDependency) as exc_info:
                run_gh("pr", "view", "1")
        assert exc_info.value.tools == ["gh"]


def test_check_gh_installed_false_when_missing():
    with patch("prworktree.gh_ops.subprocess.run", side_effect=FileNotFoundError):
        assert check_gh_installed() is False
