"""Tests for the Git adapter."""

import pytest

from symfony_review.vcs import (
    ComparisonError,
    ComparisonRequest,
    GitAdapter,
    RefNotFoundError,
)

from conftest import commit_files


class TestResolveRef:
    def test_existing_branch(self, symfony_repo):
        adapter = GitAdapter(symfony_repo.working_tree_dir)
        ref = adapter.resolve_ref("feature/users")
        assert ref.name == "feature/users"
        assert ref.hexsha == symfony_repo.heads["feature/users"].commit.hexsha

    def test_missing_branch(self, symfony_repo):
        adapter = GitAdapter(symfony_repo.working_tree_dir)
        with pytest.raises(RefNotFoundError, match="does-not-exist"):
            adapter.resolve_ref("does-not-exist")

    def test_empty_name(self, symfony_repo):
        adapter = GitAdapter(symfony_repo.working_tree_dir)
        with pytest.raises(RefNotFoundError):
            adapter.resolve_ref("")


class TestChangedFiles:
    def test_lists_feature_changes(self, symfony_repo):
        adapter = GitAdapter(symfony_repo.working_tree_dir)
        changed = adapter.list_changed_files("base", "feature/users")
        assert changed == ("src/Controller/UserController.php",)

    def test_pathspecs_filter(self, symfony_repo):
        commit_files(symfony_repo, {"docs/notes.md": "notes\n"}, "Add notes")
        adapter = GitAdapter(symfony_repo.working_tree_dir)
        assert "docs/notes.md" in adapter.list_changed_files("base", "feature/users")
        assert adapter.list_changed_files("base", "feature/users", ["*.php"]) == (
            "src/Controller/UserController.php",
        )

    def test_uses_merge_base(self, symfony_repo):
        # a commit on base after branching is not part of the feature's changes
        symfony_repo.heads["base"].checkout()
        commit_files(symfony_repo, {"src/Service/Mailer.php": "<?php\n"}, "Base moves on")
        symfony_repo.heads["feature/users"].checkout()

        adapter = GitAdapter(symfony_repo.working_tree_dir)
        assert adapter.list_changed_files("base", "feature/users") == (
            "src/Controller/UserController.php",
        )

    def test_non_ascii_path_is_not_quoted(self, symfony_repo):
        commit_files(symfony_repo, {"src/Controller/CaféController.php": "<?php\n"}, "Add café")
        adapter = GitAdapter(symfony_repo.working_tree_dir)
        changed = adapter.list_changed_files("base", "feature/users", ["*.php"])
        assert changed == (
            "src/Controller/CaféController.php",
            "src/Controller/UserController.php",
        )
        assert all((adapter.working_dir / path).is_file() for path in changed)

    def test_invalid_ref(self, symfony_repo):
        adapter = GitAdapter(symfony_repo.working_tree_dir)
        with pytest.raises(ComparisonError):
            adapter.list_changed_files("base", "nope")


class TestRenderDiff:
    def test_diff_contains_changed_path(self, symfony_repo):
        adapter = GitAdapter(symfony_repo.working_tree_dir)
        diff = adapter.render_diff("base", "feature/users")
        assert "src/Controller/UserController.php" in diff
        assert "+final class UserController" in diff

    def test_same_ref_is_empty(self, symfony_repo):
        adapter = GitAdapter(symfony_repo.working_tree_dir)
        assert adapter.render_diff("feature/users", "feature/users") == ""

    def test_invalid_ref(self, symfony_repo):
        adapter = GitAdapter(symfony_repo.working_tree_dir)
        with pytest.raises(ComparisonError):
            adapter.render_diff("nope", "feature/users")


class TestAdapter:
    def test_not_a_repository(self, tmp_path):
        with pytest.raises(ComparisonError, match="Not in a git repository"):
            GitAdapter(tmp_path / "missing")

    def test_working_dir(self, symfony_repo):
        adapter = GitAdapter(symfony_repo.working_tree_dir)
        assert (adapter.working_dir / "README.md").is_file()

    def test_fetch_without_remote(self, symfony_repo):
        adapter = GitAdapter(symfony_repo.working_tree_dir)
        assert adapter.fetch("origin") is False

    def test_range_spec(self):
        assert ComparisonRequest("origin/main", "feature/x").range_spec == "origin/main...feature/x"
