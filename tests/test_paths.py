from __future__ import annotations

from pathlib import Path

import pytest

from src.fuzzpatch.config import PatchOptions
from src.fuzzpatch.engine import PatchFormatError, TargetAction, resolve_target, strip_components
from src.fuzzpatch.engine.hunk import parse_hunk_header
from src.fuzzpatch.engine.paths import NULL_NAME, header_name


def test_header_name_drops_tab_metadata() -> None:
    assert header_name("--- a/src/main.c\t2024-03-01 10:00:00.000000000 +0100") == "a/src/main.c"
    assert header_name("+++ b/src/main.c") == "b/src/main.c"


def test_header_name_treats_epoch_dates_as_missing_file() -> None:
    assert header_name("+++ b/gone.txt\t1970-01-01 00:00:00.000000000 +0000") == NULL_NAME
    assert header_name("--- a/new.txt\t1969-12-31 19:00:00 -0500") == NULL_NAME
    assert header_name("--- a/kept.txt\t(revision 0)") == "a/kept.txt"


@pytest.mark.parametrize(
    ("name", "count", "expected"),
    [
        ("a/src/main.c", 1, "src/main.c"),
        ("a/src/main.c", 0, "a/src/main.c"),
        ("a//src///main.c", 2, "main.c"),
        ("/usr/include/stdio.h", 1, "usr/include/stdio.h"),
        ("a/src/main.c", None, "main.c"),
        ("main.c", 3, "main.c"),
    ],
)
def test_strip_components(name: str, count: int | None, expected: str) -> None:
    assert strip_components(name, count) == expected


def test_resolve_forward_uses_new_name(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.c").write_text("x\n", encoding="utf-8")
    options = PatchOptions(directory=tmp_path, strip=1)
    target = resolve_target("a/src/old.c", "b/src/main.c", parse_hunk_header("@@ -1,3 +1,4 @@"), options)
    assert target.action is TargetAction.PATCH
    assert target.path == tmp_path / "src" / "main.c"
    assert target.display == "src/main.c"


def test_resolve_reverse_uses_old_name(tmp_path: Path) -> None:
    options = PatchOptions(directory=tmp_path, strip=1, reverse=True)
    target = resolve_target("a/old.c", "b/new.c", parse_hunk_header("@@ -1,3 +1,4 @@"), options)
    assert target.display == "old.c"


def test_resolve_creation_when_old_side_is_null(tmp_path: Path) -> None:
    options = PatchOptions(directory=tmp_path, strip=1)
    target = resolve_target("/dev/null", "b/pkg/new.txt", parse_hunk_header("@@ -0,0 +1,2 @@"), options)
    assert target.action is TargetAction.CREATE
    assert target.path == tmp_path / "pkg" / "new.txt"


def test_resolve_deletion_uses_the_other_name(tmp_path: Path) -> None:
    options = PatchOptions(directory=tmp_path, strip=1)
    target = resolve_target("a/old.txt", "/dev/null", parse_hunk_header("@@ -1,2 +0,0 @@"), options)
    assert target.action is TargetAction.DELETE
    assert target.display == "old.txt"


def test_resolve_reverse_of_creation_deletes(tmp_path: Path) -> None:
    options = PatchOptions(directory=tmp_path, strip=1, reverse=True)
    target = resolve_target("/dev/null", "b/new.txt", parse_hunk_header("@@ -0,0 +1,2 @@"), options)
    assert target.action is TargetAction.DELETE
    assert target.display == "new.txt"


def test_literal_target_overrides_header_names(tmp_path: Path) -> None:
    literal = tmp_path / "elsewhere" / "file.txt"
    options = PatchOptions(directory=tmp_path, strip=3, target=literal)
    assert options.strip == 0
    target = resolve_target("a/x/y.txt", "b/x/y.txt", parse_hunk_header("@@ -1 +1 @@"), options)
    assert target.path == literal


def test_resolve_rejects_null_on_both_sides(tmp_path: Path) -> None:
    options = PatchOptions(directory=tmp_path)
    with pytest.raises(PatchFormatError):
        resolve_target("/dev/null", "/dev/null", parse_hunk_header("@@ -1 +1 @@"), options)


def test_resolve_emptied_file_is_patched_not_deleted(tmp_path: Path) -> None:
    (tmp_path / "f.txt").write_text("x\ny\n", encoding="utf-8")
    options = PatchOptions(directory=tmp_path, strip=1)
    target = resolve_target("a/f.txt", "b/f.txt", parse_hunk_header("@@ -1,2 +0,0 @@"), options)
    assert target.action is TargetAction.PATCH
    assert target.display == "f.txt"
