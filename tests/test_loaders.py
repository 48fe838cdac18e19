import pytest

from doppelgangers.core.records import EmbeddingRecord
from doppelgangers.errors import VectorLengthMismatchError
from doppelgangers.loaders import EmbeddingsJsonlLoader, get_loader, list_loaders, parse_lines, records_to_frame


def test_parse_lines_skips_blank_and_malformed_lines(make_line):
    lines = [
        make_line("https://github.com/o/r/pull/1", [0.1, 0.2]),
        "",
        "{not json",
        '["a", "list"]',
        '{"url": "https://github.com/o/r/pull/2", "title": "no vector"}',
        '{"url": "https://github.com/o/r/pull/3", "embedding": ["x", 1]}',
        make_line("https://github.com/o/r/pull/4", [0.3, 0.4]),
    ]
    records = parse_lines(lines)
    assert [r.url for r in records] == ["https://github.com/o/r/pull/1", "https://github.com/o/r/pull/4"]
    assert records[1].embedding == [0.3, 0.4]


def test_record_normalizes_optional_fields():
    record = EmbeddingRecord.from_dict({
        "url": "u",
        "title": "t",
        "body": None,
        "embedding": [1, 2],
        "number": 12,
        "state": "OPEN",
        "type": "pull_request",
        "files": ["a.py", "b.py"],
    })
    assert record.body == ""
    assert record.number == 12
    assert record.state == "open"
    assert record.type == "pr"
    assert record.files == ["a.py", "b.py"]


def test_record_drops_unknown_state_and_type():
    record = EmbeddingRecord.from_dict({"url": "u", "embedding": [1.0], "state": "merged", "type": "discussion"})
    assert record.state is None
    assert record.type is None
    assert "state" not in record.to_dict()


def test_loader_reads_file_in_order(embeddings_file):
    loader = EmbeddingsJsonlLoader(embeddings_file)
    records = loader.load()
    assert len(records) == 12
    assert records[0].url.endswith("/pull/0")
    assert records[0].type == "issue"
    assert records[1].state == "open"
    assert all(r.dimension == 8 for r in records)
    assert loader.name == "embeddings"


def test_loader_rejects_mixed_vector_lengths(write_jsonl, make_line):
    path = write_jsonl([
        make_line("a", [0.1, 0.2, 0.3]),
        make_line("b", [0.1, 0.2]),
        make_line("c", [0.1, 0.2, 0.3]),
        make_line("d", [0.1]),
    ])
    with pytest.raises(VectorLengthMismatchError) as info:
        EmbeddingsJsonlLoader(path).load()
    assert info.value.expected == 3
    assert info.value.offending == [1, 3]


def test_loader_missing_file(tmp_path):
    loader = EmbeddingsJsonlLoader(tmp_path / "missing.jsonl")
    assert not loader.exists()
    with pytest.raises(FileNotFoundError):
        loader.load()


def test_empty_file_loads_no_records(write_jsonl):
    path = write_jsonl(["", "   "])
    assert EmbeddingsJsonlLoader(path).load() == []


def test_registry_exposes_jsonl_loader(embeddings_file):
    assert "jsonl" in list_loaders()
    loader = get_loader("jsonl", path=embeddings_file)
    assert isinstance(loader, EmbeddingsJsonlLoader)
    with pytest.raises(ValueError):
        get_loader("nope")


def test_records_to_frame_omits_embeddings(embeddings_file):
    frame = records_to_frame(EmbeddingsJsonlLoader(embeddings_file).load())
    assert list(frame.columns) == ["url", "title", "body", "number", "state", "type", "files"]
    assert len(frame) == 12
    assert (frame["type"] == "issue").sum() == 4


def test_records_to_frame_accepts_points(point_factory):
    frame = records_to_frame([point_factory(number=3, files=("a.py", "b.py"), embedding=(1.0,))])
    assert frame.loc[0, "number"] == 3
    assert frame.loc[0, "files"] == "a.py, b.py"
    assert "embedding" not in frame.columns


def test_parse_lines_skips_non_finite_embeddings(make_line):
    lines = [
        make_line("https://github.com/o/r/pull/1", [0.1, 0.2]),
        '{"url": "https://github.com/o/r/pull/2", "embedding": [NaN, 1.0]}',
        '{"url": "https://github.com/o/r/pull/3", "embedding": [Infinity, 1.0]}',
        '{"url": "https://github.com/o/r/pull/4", "embedding": [1e999, 1.0]}',
        '{"url": "https://github.com/o/r/pull/5", "embedding": [1' + "0" * 400 + ', 1.0]}',
    ]
    assert [r.url for r in parse_lines(lines)] == ["https://github.com/o/r/pull/1"]


def test_out_of_range_number_is_dropped_not_fatal():
    lines = [
        '{"url": "u1", "number": 1e999, "embedding": [0, 1]}',
        '{"url": "u2", "number": -Infinity, "embedding": [1, 0]}',
        '{"url": "u3", "number": 7.0, "embedding": [1, 1]}',
    ]
    records = parse_lines(lines)
    assert [r.url for r in records] == ["u1", "u2", "u3"]
    assert [r.number for r in records] == [None, None, 7]
