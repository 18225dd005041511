"""Tests for the per-user directory manager and byte storage."""

import io
import re

import pytest

from drive.core.errors import FileTooLarge
from drive.core.storage import (
    ensure_user_dir,
    make_stored_name,
    remove_file,
    save_stream,
    user_dir,
)


def test_ensure_user_dir_is_idempotent(tmp_path):
    first = ensure_user_dir(tmp_path, "u1")
    second = ensure_user_dir(tmp_path, "u1")

    assert first == second == tmp_path / "u1"
    assert first.is_dir()


def test_user_dir_is_derived_from_id(tmp_path):
    assert user_dir(tmp_path, "abc") == tmp_path / "abc"


def test_stored_name_keeps_readable_suffix():
    name = make_stored_name("report.pdf")
    assert re.fullmatch(r"\d+-\d{9}-report\.pdf", name)


def test_stored_name_strips_path_components():
    name = make_stored_name("../../etc/passwd")
    assert "/" not in name
    assert ".." not in name
    assert name.endswith("-etc_passwd")


def test_stored_name_falls_back_when_nothing_survives():
    assert make_stored_name("///").endswith("-upload")


def test_save_stream_writes_bytes(tmp_path):
    stored = save_stream(io.BytesIO(b"hello"), tmp_path, "a.txt", max_size=100)

    assert stored.size == 5
    assert stored.path == tmp_path / stored.stored_name
    assert stored.path.read_bytes() == b"hello"
    assert [p.name for p in tmp_path.iterdir()] == [stored.stored_name]


def test_save_stream_enforces_limit(tmp_path):
    with pytest.raises(FileTooLarge):
        save_stream(io.BytesIO(b"x" * 11), tmp_path, "a.txt", max_size=10)

    assert list(tmp_path.iterdir()) == []


def test_save_stream_exact_limit_ok(tmp_path):
    stored = save_stream(io.BytesIO(b"x" * 10), tmp_path, "a.txt", max_size=10)
    assert stored.size == 10


def test_remove_file(tmp_path):
    target = tmp_path / "f"
    target.write_bytes(b"1")

    assert remove_file(target) is True
    assert not target.exists()
    assert remove_file(target) is False
