import json

from doormate.ingestion.inspect_manual import main


def test_prints_selected_sections_as_json_lines(maintenance_pdf, capsys):
    assert main([str(maintenance_pdf), "--query", "gloves"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert [json.loads(line) for line in lines] == [{"title": "2. Safety", "bullets": ["Wear gloves"]}]


def test_prints_page_range(make_pdf, capsys):
    pdf = make_pdf("two.pdf", [["alpha"], ["beta"]])
    assert main([str(pdf), "--start", "2"]) == 0
    assert capsys.readouterr().out.strip() == "beta"


def test_reports_unreadable_manual(tmp_path):
    assert main([str(tmp_path / "missing.pdf")]) == 1


def test_page_zero_is_rejected(make_pdf, capsys):
    pdf = make_pdf("two.pdf", [["alpha"], ["beta"]])
    assert main([str(pdf), "--start", "0", "--end", "1"]) == 1
    assert capsys.readouterr().out == ""
