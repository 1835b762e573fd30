# src/boardroom/tests/test_imports.py
import importlib
import pkgutil

import pytest

import boardroom

MODULES = sorted(
    m.name
    for m in pkgutil.walk_packages(boardroom.__path__, prefix="boardroom.")
    if ".tests" not in m.name and ".migrations" not in m.name
)


@pytest.mark.parametrize("name", MODULES)
def test_module_imports(name):
    importlib.import_module(name)


def test_repositories_expose_list_queries():
    from boardroom.repositories import (
        CompletionEventRepository,
        ProfileRepository,
        VotableItemRepository,
    )

    for repo in (CompletionEventRepository, ProfileRepository, VotableItemRepository):
        assert callable(repo.list)
