from pathlib import Path

import pytest

from tests.test_utils.git_repo import init_repo_with_origin


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """A repository on main, in sync with a bare origin."""
    return init_repo_with_origin(tmp_path)
