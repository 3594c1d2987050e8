import json

import pytest

import tagcloud


def test_writes_html(tmp_path, capsys):
    source = tmp_path / "input.txt"
    source.write_text("the cat sat on the mat the cat ran\n", encoding="utf-8")
    target = tmp_path / "out" / "cloud.html"

    tagcloud.main([str(source), str(target), "-n", "3"])

    assert capsys.readouterr().out.strip() == str(target)
    document = target.read_text(encoding="utf-8")
    assert "Top 3 words in" in document
    assert document.count("<span ") == 3


def test_dump_json(tmp_path):
    source = tmp_path / "input.txt"
    source.write_text("go go go", encoding="utf-8")
    dump = tmp_path / "words.json"

    tagcloud.main([str(source), str(tmp_path / "cloud.html"), "--count", "1", "--dump-json", str(dump)])

    assert json.loads(dump.read_text(encoding="utf-8")) == [
        {"text": "go", "count": 3, "size": 11, "class": "f11"}
    ]


def test_missing_input(tmp_path):
    missing = tmp_path / "missing.txt"
    with pytest.raises(SystemExit) as excinfo:
        tagcloud.main([str(missing), str(tmp_path / "cloud.html")])
    assert "missing.txt" in str(excinfo.value)


def test_unwritable_output(tmp_path):
    source = tmp_path / "input.txt"
    source.write_text("a b c", encoding="utf-8")
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        tagcloud.main([str(source), str(blocker / "cloud.html")])
    assert "Cannot write output file" in str(excinfo.value)


@pytest.mark.parametrize("count", ["0", "-2", "many"])
def test_rejects_bad_count(tmp_path, count):
    with pytest.raises(SystemExit) as excinfo:
        tagcloud.main(["in.txt", "out.html", "-n", count])
    assert excinfo.value.code == 2


def test_stylesheet_options():
    assert tagcloud.resolved_stylesheets(["mine.css"], False) == ("mine.css",)
    assert tagcloud.resolved_stylesheets([], True)[-1] == "tagcloud.css"
