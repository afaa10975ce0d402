import pytest

from toyos.config import MAX_PATH
from toyos.errors import BadPath
from toyos.pathparser import ParsedPath, is_valid_format, parse_path


def test_simple_file_on_drive_zero():
    parsed = parse_path("0:/test.txt")
    assert parsed == ParsedPath(0, ("test.txt",))
    assert not parsed.is_root


def test_nested_path_on_other_drive():
    parsed = parse_path("1:/tmp/file.txt")
    assert parsed.drive_no == 1
    assert parsed.parts == ("tmp", "file.txt")


def test_root_only_has_no_parts():
    parsed = parse_path("0:/")
    assert parsed.parts == ()
    assert parsed.is_root


def test_parsing_stops_at_empty_component():
    assert parse_path("0:/a//b").parts == ("a",)
    assert parse_path("0:/a/b/").parts == ("a", "b")


def test_current_directory_is_ignored():
    assert parse_path("0:/shell.elf", "0:/bin") == parse_path("0:/shell.elf")


@pytest.mark.parametrize("bad", ["", "0:", "A:/x", "0:x/y", "0/x", ":/x"])
def test_malformed_paths_raise(bad):
    with pytest.raises(BadPath):
        parse_path(bad)


def test_path_at_limit_is_accepted():
    path = "0:/" + "a" * (MAX_PATH - 3)
    assert len(path) == MAX_PATH
    assert parse_path(path).parts == ("a" * (MAX_PATH - 3),)


def test_path_over_limit_raises():
    with pytest.raises(BadPath):
        parse_path("0:/" + "a" * (MAX_PATH - 2))


def test_text_after_nul_is_ignored():
    assert parse_path("0:/abc\x00/def").parts == ("abc",)


@pytest.mark.parametrize(
    "path, expected",
    [("0:/", True), ("9:/x", True), ("0:\\x", False), ("x:/", False), ("0:", False)],
)
def test_is_valid_format(path, expected):
    assert is_valid_format(path) is expected


def test_parts_joined_round_trip():
    path = "2:/one/two/three.bin"
    parsed = parse_path(path)
    assert f"{parsed.drive_no}:/" + "/".join(parsed.parts) == path