import pytest

from core.config import AnimationConfig
from core.registry import create_tree

ENGINE_KINDS = ("bst", "avl", "rbtree")


@pytest.fixture
def checked_config():
    """Validates every invariant after each mutating call."""
    return AnimationConfig(check_invariants=True)


@pytest.fixture(params=ENGINE_KINDS)
def tree(request, checked_config):
    return create_tree(request.param, checked_config)


@pytest.fixture
def make_tree(checked_config):
    def _make(kind, values=()):
        built = create_tree(kind, checked_config)
        for value in values:
            built.insert(value)
        return built

    return _make
