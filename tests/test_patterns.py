from __future__ import annotations

import pytest

from rules.patterns import matches_class, matches_file, validate_pattern


def test_validate_pattern_rejects_empty_and_unterminated_sets() -> None:
    with pytest.raises(ValueError, match="non-empty"):
        validate_pattern("  ")
    with pytest.raises(ValueError, match="unterminated"):
        validate_pattern("lib[0-9.jar")
    with pytest.raises(ValueError, match="nested"):
        validate_pattern("lib[[0-9]].jar")


def test_validate_pattern_accepts_globs() -> None:
    assert validate_pattern(" *-lib[0-9].jar ") == "*-lib[0-9].jar"


def test_matches_class_package_wildcard_covers_subpackages() -> None:
    patterns = ["com.pkg.*"]

    assert matches_class("com.pkg.Foo", patterns)
    assert matches_class("com.pkg.sub.Bar", patterns)
    assert not matches_class("com.pkgother.Foo", patterns)
    assert not matches_class("org.pkg.Foo", patterns)


def test_matches_class_nested_classes_follow_outer_class() -> None:
    assert matches_class("com.acme.Outer$Inner", ["com.acme.Outer"])
    assert not matches_class("com.acme.Other$Inner", ["com.acme.Outer"])


def test_matches_file_by_name_or_path() -> None:
    assert matches_file("/repo/libs/lib2.jar", ["lib2.jar"])
    assert matches_file("/repo/libs/lib2.jar", ["*/libs/*"])
    assert not matches_file("/repo/libs/lib1.jar", ["lib2*"])
