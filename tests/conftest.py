"""Shared fixtures: throwaway Git repositories shaped like a Symfony project."""

from pathlib import Path

import git
import pytest

AUTHOR = git.Actor("Review Bot", "bot@example.com")

CONTROLLER = """<?php

declare(strict_types=1);

namespace App\\Controller;

final class UserController
{
    public function index(): array
    {
        return [];
    }
}
"""


def commit_files(repo: git.Repo, files: dict, message: str) -> git.Commit:
    """Write files (text or raw bytes) into the working tree and commit them."""
    root = Path(repo.working_tree_dir)
    paths = []
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
        paths.append(str(path))
    repo.index.add(paths)
    return repo.index.commit(message, author=AUTHOR, committer=AUTHOR)


@pytest.fixture
def symfony_repo(tmp_path):
    """Repo with a ``base`` branch and a ``feature/users`` branch adding one controller."""
    repo = git.Repo.init(tmp_path)
    commit_files(
        repo,
        {
            "README.md": "# Shop\n",
            "composer.json": '{"require": {"php": ">=8.2"}}\n',
            "src/Entity/User.php": "<?php\nclass User {}\n",
            "templates/base.html.twig": "{% block body %}{% endblock %}\n",
            "assets/app.js": "import x from './x';\n",
        },
        "Initial commit",
    )
    repo.create_head("base")
    feature = repo.create_head("feature/users")
    feature.checkout()
    commit_files(repo, {"src/Controller/UserController.php": CONTROLLER}, "Add user controller")
    return repo
