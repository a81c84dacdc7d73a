"""devsweep data models."""

from devsweep.models.candidate import Candidate, ScanOptions
from devsweep.models.clean_result import CleanResult
from devsweep.models.source import DevToolSource, ScanSource
from devsweep.models.tree_node import TreeNode

__all__ = [
    "Candidate",
    "CleanResult",
    "DevToolSource",
    "ScanOptions",
    "ScanSource",
    "TreeNode",
]
