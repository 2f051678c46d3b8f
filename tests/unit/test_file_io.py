"""Unit tests for upload intake: type and size rules, staging, size formatting."""

import pytest

from doc_analyzer.utils.file_io import (
    DEFAULT_ACCEPTED_TYPES,
    build_uploaded_files,
    format_file_size,
    save_uploaded_files,
)


@pytest.mark.parametrize(
    "num_bytes,expected",
    [
        (0, "0 Bytes"),
        (512, "512 Bytes"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (10 * 1024 * 1024, "10 MB"),
        (3 * 1024**3, "3 GB"),
    ],
)
def test_format_file_size(num_bytes, expected):
    assert format_file_size(num_bytes) == expected


def test_accepts_supported_types_with_mime(make_upload):
    uploads = [
        make_upload("notes.txt", "hello"),
        make_upload("script.py", "print('hi')"),
        make_upload("Report.PDF", b"%PDF-1.4"),
    ]

    accepted, rejected = build_uploaded_files(uploads)

    assert rejected == []
    assert [f.name for f in accepted] == ["notes.txt", "script.py", "Report.PDF"]
    assert accepted[0].mime_type == "text/plain"
    assert accepted[1].mime_type == "text/x-python"
    assert accepted[2].mime_type == DEFAULT_ACCEPTED_TYPES[".pdf"]
    assert accepted[0].size == 5
    assert accepted[0].content == b"hello"
    assert len({f.id for f in accepted}) == 3


def test_rejects_unsupported_extension(make_upload):
    accepted, rejected = build_uploaded_files(
        [make_upload("image.png", b"\x89PNG"), make_upload("noext", b"x")]
    )

    assert accepted == []
    assert rejected == [
        {"name": "image.png", "reason": "Unsupported file type: .png"},
        {"name": "noext", "reason": "Unsupported file type: none"},
    ]


def test_rejects_files_over_size_cap(make_upload):
    big = make_upload("big.txt", b"a" * (1024 * 1024 + 1))
    small = make_upload("small.txt", b"a" * 10)

    accepted, rejected = build_uploaded_files([big, small], max_file_size_mb=1)

    assert [f.name for f in accepted] == ["small.txt"]
    assert rejected == [{"name": "big.txt", "reason": "File exceeds 1 MB limit"}]


def test_file_exactly_at_cap_is_accepted(make_upload):
    exact = make_upload("exact.txt", b"a" * (1024 * 1024))

    accepted, rejected = build_uploaded_files([exact], max_file_size_mb=1)

    assert len(accepted) == 1
    assert rejected == []


def test_uses_custom_accepted_types(make_upload):
    accepted, rejected = build_uploaded_files(
        [make_upload("data.csv", "a,b"), make_upload("notes.txt", "x")],
        accepted_types={".csv": "text/csv"},
    )

    assert [f.mime_type for f in accepted] == ["text/csv"]
    assert rejected[0]["name"] == "notes.txt"


def test_path_components_are_stripped_from_names(make_upload):
    accepted, _ = build_uploaded_files([make_upload("../../etc/notes.txt", "x")])
    assert accepted[0].name == "notes.txt"


def test_save_uploaded_files_stages_bytes(make_upload, tmp_path):
    accepted, _ = build_uploaded_files([make_upload("My Notes!.txt", "content here")])

    paths = save_uploaded_files(accepted, tmp_path / "staging")

    path = paths[accepted[0].id]
    assert path.parent == tmp_path / "staging"
    assert path.suffix == ".txt"
    assert path.name.startswith("my_notes_")
    assert path.read_bytes() == b"content here"
