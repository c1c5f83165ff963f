"""Tests for source specification path resolution."""

import pytest

from gembs.build.build_context import PipelineContext
from gembs.build.path_resolver import normalize_separators, path_extension, resolve_path, split_wildcard
from gembs.errors import DirectoryUnreadableError, PathNotFoundError


@pytest.fixture
def context(project):
    root = project(files=["a.c", "b.c", "c.h", "notes.txt", "abc", "src/d.c", "include/e.h"])
    return PipelineContext.create(root)


class TestSplitWildcard:
    def test_trailing_wildcard(self):
        assert split_wildcard("/proj/src/*.c") == ("/proj/src/", "c")

    def test_multi_character_extension(self):
        assert split_wildcard("/proj/*.cpp") == ("/proj/", "cpp")

    def test_no_wildcard(self):
        assert split_wildcard("/proj/src/main.c") is None

    def test_wildcard_in_middle_segment_is_literal(self):
        assert split_wildcard("/proj/*.d/main.c") is None

    def test_wildcard_not_after_separator_is_literal(self):
        assert split_wildcard("/proj/src/lib*.c") is None

    def test_bare_wildcard_without_separator_is_literal(self):
        assert split_wildcard("*.c") is None

    def test_empty_extension_is_literal(self):
        assert split_wildcard("/proj/*.") is None


def test_normalize_separators():
    assert normalize_separators("C:\\proj\\src\\a.c") == "C:/proj/src/a.c"


def test_path_extension():
    assert path_extension("/proj/src/a.c") == "c"
    assert path_extension("/proj.d/include") == ""
    assert path_extension("/proj/archive.tar.gz") == "gz"


class TestResolveLiteral:
    def test_existing_file_with_root_placeholder(self, context):
        root = context.root_dir
        assert resolve_path("$root/a.c", context) == [f"{root}/a.c"]
        assert context.extensions == ["c"]

    def test_backslashes_normalized(self, context):
        root = context.root_dir
        assert resolve_path("$root\\src\\d.c", context) == [f"{root}/src/d.c"]

    def test_missing_file_raises(self, context):
        with pytest.raises(PathNotFoundError) as exc_info:
            resolve_path("$root/missing.c", context)
        assert exc_info.value.path == f"{context.root_dir}/missing.c"
        assert context.extensions == []

    def test_directory_records_no_extension(self, context):
        root = context.root_dir
        assert resolve_path("$root/include", context) == [f"{root}/include"]
        assert context.extensions == []

    def test_resolving_resolved_path_is_noop(self, context):
        first = resolve_path("$root/a.c", context)
        assert resolve_path(first[0], context) == first

    def test_wildcard_segment_elsewhere_is_not_expanded(self, context):
        with pytest.raises(PathNotFoundError):
            resolve_path("$root/*.c/a.c", context)


class TestResolveWildcard:
    def test_matches_name_suffix(self, context):
        root = context.root_dir
        assert resolve_path("$root/*.h", context) == [f"{root}/c.h"]

    def test_entry_without_dot_is_matched(self, context):
        root = context.root_dir
        assert resolve_path("$root/*.c", context) == [f"{root}/a.c", f"{root}/abc", f"{root}/b.c", f"{root}/src"]

    def test_records_extension_once(self, context):
        resolve_path("$root/*.c", context)
        resolve_path("$root/src/*.c", context)
        resolve_path("$root/*.h", context)
        assert context.extensions == ["c", "h"]

    def test_order_is_deterministic(self, context):
        assert resolve_path("$root/*.c", context) == resolve_path("$root/*.c", context)

    def test_no_matches_returns_empty(self, context):
        assert resolve_path("$root/*.rs", context) == []
        assert context.extensions == ["rs"]

    def test_missing_directory_raises(self, context):
        with pytest.raises(DirectoryUnreadableError) as exc_info:
            resolve_path("$root/nope/*.c", context)
        assert exc_info.value.directory == f"{context.root_dir}/nope/"

    def test_expanded_paths_are_idempotent(self, context):
        expanded = resolve_path("$root/*.c", context)
        again = [path for spec in expanded for path in resolve_path(spec, context)]
        assert again == expanded
