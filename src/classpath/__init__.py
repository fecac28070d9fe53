"""Classpath model: module artifacts and partitioning."""

from classpath.artifacts import (
    ArtifactSet,
    LazyArtifactSet,
    ModuleInfo,
    collect_module_artifacts,
)
from classpath.partition import Partition, apply_excludes, partition

__all__ = [
    "ArtifactSet",
    "LazyArtifactSet",
    "ModuleInfo",
    "Partition",
    "apply_excludes",
    "collect_module_artifacts",
    "partition",
]
