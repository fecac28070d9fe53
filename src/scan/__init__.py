"""Scanning of classpath entries and compiled-class reference indexes."""

from scan.classes import find_files, has_sources, list_classes
from scan.references import ReferenceRecord, iter_references, read_references

__all__ = [
    "ReferenceRecord",
    "find_files",
    "has_sources",
    "iter_references",
    "list_classes",
    "read_references",
]
