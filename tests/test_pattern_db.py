import json
import logging

import pytest

from npuzzle_pdb.errors import PatternDBError
from npuzzle_pdb.heuristics.pattern_db import PatternDatabase, PatternGroup


def test_from_document_keeps_group_order():
    db = PatternDatabase.from_document(
        {"groups": [[1, 2], [3]], "patternDbDict": [{"0011": 1}, {"10": 0}]}, 2)
    assert len(db) == 2
    assert db.groups[0] == PatternGroup(0, (1, 2))
    assert db.groups[1].members == frozenset({3})
    assert db.lookup(0, "0011") == 1
    assert db.lookup(1, "10") == 0
    assert db.lookup(0, "10") is None
    assert db.entry_count == 2
    assert not db.is_empty


def test_tables_are_read_only():
    db = PatternDatabase.from_document({"groups": [[1]], "patternDbDict": [{"00": 0}]}, 2)
    with pytest.raises(TypeError):
        db.tables[0]["01"] = 1


def test_empty_document_gives_empty_database():
    db = PatternDatabase.from_document({"groups": [], "patternDbDict": []}, 4)
    assert db.is_empty
    assert len(db) == 0


@pytest.mark.parametrize("doc, fragment", [
    ([], "JSON object"),
    ({"groups": [[1]]}, "patternDbDict"),
    ({"groups": [[1]], "patternDbDict": [{}, {}]}, "entries"),
    ({"groups": [[0]], "patternDbDict": [{}]}, "outside"),
    ({"groups": [[4]], "patternDbDict": [{}]}, "outside"),
    ({"groups": [["1"]], "patternDbDict": [{}]}, "outside"),
    ({"groups": [1], "patternDbDict": [{}]}, "list of tiles"),
    ({"groups": [[1]], "patternDbDict": [[]]}, "object"),
    ({"groups": [[1]], "patternDbDict": [{"00": -1}]}, "non-negative"),
    ({"groups": [[1]], "patternDbDict": [{"00": 1.5}]}, "non-negative"),
    ({"groups": {}, "patternDbDict": []}, "lists"),
])
def test_invalid_documents_are_rejected(doc, fragment):
    with pytest.raises(PatternDBError, match=fragment):
        PatternDatabase.from_document(doc, 2)


def test_overlapping_groups_are_accepted_with_a_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="npuzzle_pdb.heuristics.pattern_db"):
        db = PatternDatabase.from_document({"groups": [[1, 2], [2, 3]], "patternDbDict": [{}, {}]}, 2)
    assert len(db) == 2
    assert "tile 2 appears in groups 0 and 1" in caplog.text


def test_load_reads_json_file(pdb_file_3x3):
    db = PatternDatabase.load(pdb_file_3x3, 3)
    assert db.board_size == 3
    assert [g.tiles for g in db.groups] == [(1, 2, 3, 4), (5, 6, 7, 8)]
    assert db.lookup(0, "00010210") == 0  # tiles 1..4 in place


def test_load_for_size_uses_asset_name(pdb_file_3x3):
    db = PatternDatabase.load_for_size(3, pdb_file_3x3.parent)
    assert len(db) == 2
    with pytest.raises(PatternDBError, match="not found"):
        PatternDatabase.load_for_size(4, pdb_file_3x3.parent)


def test_load_rejects_corrupt_json(tmp_path):
    bad = tmp_path / "patternDb_3.json"
    bad.write_text('{"groups": [[1, 2]], "patternDbDict": [', encoding="utf-8")
    with pytest.raises(PatternDBError, match="cannot read"):
        PatternDatabase.load(bad, 3)


def test_load_validates_contents(tmp_path):
    p = tmp_path / "patternDb_2.json"
    p.write_text(json.dumps({"groups": [[1, 2]], "patternDbDict": []}), encoding="utf-8")
    with pytest.raises(PatternDBError):
        PatternDatabase.load(p, 2)


def test_manhattan_only_database_covers_every_tile():
    db = PatternDatabase.manhattan_only(3)
    assert len(db) == 1
    assert db.groups[0].tiles == tuple(range(1, 9))
    assert db.entry_count == 0
    assert not db.is_empty


def test_mismatched_constructor_arguments():
    with pytest.raises(PatternDBError):
        PatternDatabase(3, [PatternGroup(0, (1,))], [])
