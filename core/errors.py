class TreeVisualizerError(Exception):
    """Base class for every error raised by the tree engines."""


class ConfigError(TreeVisualizerError, ValueError):
    """Raised when an animation config file or mapping is malformed."""


class SnapshotError(TreeVisualizerError, ValueError):
    """Raised when a snapshot cannot be turned back into a tree."""


class TreeInvariantError(TreeVisualizerError, AssertionError):
    """
    A structural invariant (order, parent links, balance, colours) is broken.
    This always points at a bug in the rebalancing code, never at user input.
    """
