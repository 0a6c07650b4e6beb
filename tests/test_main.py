import json

import pytest

from relmap.main import build_parser, main


@pytest.fixture
def export_file(tmp_path, acme_data):
    path = tmp_path / "export.json"
    path.write_text(json.dumps(acme_data), encoding="utf-8")
    return str(path)


def test_maps_company_from_export(export_file, tmp_path, capsys):
    out_dir = tmp_path / "out"
    code = main(["--source-file", export_file, "--company-id", "100", "-o", str(out_dir)])

    output = capsys.readouterr().out
    assert code == 0
    assert "RELATIONSHIP MAPPING REPORT" in output
    assert "Account manager: Ann Berg <ann@ours.dk>" in output
    assert "└── 🏢 Acme A/S ✅" in output
    assert "[+] JSON report saved to:" in output
    assert (out_dir / "relmap_results.json").exists()


def test_no_json_and_no_tree(export_file, tmp_path, capsys):
    out_dir = tmp_path / "out"
    code = main([
        "--source-file", export_file, "--company-id", "100",
        "-o", str(out_dir), "--no-json", "--no-tree"
    ])

    output = capsys.readouterr().out
    assert code == 0
    assert "Relationship Tree" not in output
    assert not out_dir.exists()


def test_unknown_company_exits_nonzero(export_file, tmp_path, capsys):
    code = main(["--source-file", export_file, "--company-id", "999", "-o", str(tmp_path), "--no-json"])
    assert code == 1
    assert "Error mapping relationships" in capsys.readouterr().out


def test_missing_export_file(tmp_path, capsys):
    code = main(["--source-file", str(tmp_path / "missing.json"), "--company-id", "100"])
    assert code == 1
    assert "[!] Error: Source file not found" in capsys.readouterr().out


def test_source_is_required(monkeypatch):
    monkeypatch.delenv("WORKBOOK_API_URL", raising=False)
    with pytest.raises(SystemExit) as exc_info:
        main(["--company-id", "100"])
    assert exc_info.value.code == 2


def test_depth_choices():
    parser = build_parser()
    assert parser.parse_args(["--max-depth", "5"]).max_depth == 5
    with pytest.raises(SystemExit):
        parser.parse_args(["--max-depth", "6"])


def test_repeated_company_ids():
    args = build_parser().parse_args(["--company-id", "1", "--company-id", "2"])
    assert args.company_ids == [1, 2]
