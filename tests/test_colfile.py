import json

from py_colstore.storage.colfile import CollectionFile


def test_creates_missing_file(tmp_path):
    path = tmp_path / "new.col"
    f = CollectionFile(path)
    try:
        assert path.exists()
        assert f.load() == []
    finally:
        f.close()


def test_load_skips_blank_and_malformed_lines(tmp_path):
    path = tmp_path / "mixed.col"
    path.write_text(
        '{"a": 1}\n'
        "\n"
        "not json at all\n"
        '{"b": 2\n'
        "   \n"
        '{"c": 3}\n',
        encoding="utf-8",
    )
    f = CollectionFile(path)
    try:
        assert f.load() == [{"a": 1}, {"c": 3}]
    finally:
        f.close()


def test_append_adds_one_line_without_touching_existing(tmp_path):
    path = tmp_path / "log.col"
    path.write_text('{"a": 1}\n', encoding="utf-8")
    f = CollectionFile(path)
    try:
        f.append({"b": "é"})
    finally:
        f.close()

    text = path.read_text(encoding="utf-8")
    assert text.startswith('{"a": 1}\n')
    lines = text.splitlines()
    assert len(lines) == 2
    assert json.loads(lines[1]) == {"b": "é"}
    assert text.endswith("\n")


def test_rewrite_replaces_content(tmp_path):
    path = tmp_path / "log.col"
    f = CollectionFile(path)
    try:
        f.append({"a": 1})
        f.append({"b": 2})
        f.rewrite([{"z": 26}])
    finally:
        f.close()

    assert path.read_text(encoding="utf-8") == json.dumps({"z": 26}) + "\n"


def test_rewrite_empty_truncates(tmp_path):
    path = tmp_path / "log.col"
    f = CollectionFile(path)
    try:
        f.append({"a": 1})
        f.rewrite([])
    finally:
        f.close()

    assert path.read_bytes() == b""


def test_close_is_idempotent(tmp_path):
    f = CollectionFile(tmp_path / "x.col")
    f.close()
    f.close()
    assert f.closed


def test_load_skips_lines_that_are_not_utf8(tmp_path):
    path = tmp_path / "bytes.col"
    path.write_bytes(b'{"_id": "a"}\n\xff\xfe bad\n{"_id": "b", "s": "\xc3\xa9"}\n')
    f = CollectionFile(path)
    try:
        assert f.load() == [{"_id": "a"}, {"_id": "b", "s": "é"}]
    finally:
        f.close()
