"""
Tests for the command line interface.
"""

import json

import pytest

from text_annotator.cli import build_parser, main
from text_annotator.core.annotation.utils import load_annotations, save_annotations
from text_annotator.utils.misc import read_version

from conftest import make_annotation, make_relation


@pytest.fixture
def export(tmp_path):
    a = make_annotation("#local-a", value="first")
    b = make_annotation("srv-b", value="second")
    path = tmp_path / "annotations.json"
    save_annotations([a, b, make_relation(a, b, "#local-r").annotation], path)
    return path


def test_subcommands_discovered():
    parser = build_parser()
    args = parser.parse_args(["inspect", "file.json"])
    assert args.fn is not None


def test_version(capsys):
    assert main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == read_version()


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "inspect" in capsys.readouterr().out


def test_inspect(export, capsys):
    assert main(["inspect", str(export)]) == 0

    out = capsys.readouterr().out
    assert "Annotations: 2" in out
    assert "Relations: 1" in out
    assert "#local-a * commenting:first" in out
    assert "[#local-a -> srv-b]" in out


def test_inspect_ids_only(export, capsys):
    assert main(["inspect", "--ids-only", str(export)]) == 0
    assert capsys.readouterr().out.split() == ["#local-a", "srv-b", "#local-r"]


def test_inspect_reports_dangling(tmp_path, capsys):
    a, z = make_annotation("a"), make_annotation("z")
    path = tmp_path / "dangling.json"
    save_annotations([a, make_relation(a, z, "r").annotation], path)

    assert main(["inspect", str(path)]) == 1
    assert "Dangling relations: 1" in capsys.readouterr().out


def test_reconcile(export, tmp_path):
    mapping = tmp_path / "mapping.json"
    mapping.write_text(
        json.dumps({"#local-a": "srv-a", "#local-r": "srv-r", "#missing": "x"})
    )
    output = tmp_path / "out.json"

    assert main(["reconcile", str(export), str(mapping), "-o", str(output)]) == 0

    result = {a.id: a for a in load_annotations(output)}
    assert set(result) == {"srv-a", "srv-b", "srv-r"}
    assert result["srv-r"].target == [{"id": "srv-a"}, {"id": "srv-b"}]
    assert result["srv-a"].bodies[0]["value"] == "first"


def test_reconcile_rejects_bad_mapping(export, tmp_path):
    mapping = tmp_path / "mapping.json"
    mapping.write_text("[]")

    with pytest.raises(ValueError):
        main(["reconcile", str(export), str(mapping), "-o", str(tmp_path / "o.json")])
