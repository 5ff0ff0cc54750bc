import json

import pytest

from lib.kintone_applib.files import load_payload, save_json, structure_filename, unwrap


def test_load_json_and_yaml(tmp_path):
    (tmp_path / "a.json").write_text('{"views": {"x": 1}}', encoding="utf-8")
    (tmp_path / "b.yml").write_text("views:\n  x: 1\n", encoding="utf-8")

    assert load_payload("a.json", tmp_path) == {"views": {"x": 1}}
    assert load_payload(tmp_path / "b.yml") == {"views": {"x": 1}}


def test_load_payload_errors(tmp_path):
    (tmp_path / "broken.json").write_text("{", encoding="utf-8")

    with pytest.raises(FileNotFoundError):
        load_payload(tmp_path / "missing.json")
    with pytest.raises(ValueError):
        load_payload(tmp_path / "broken.json")


def test_unwrap():
    assert unwrap({"views": {"x": 1}}, "views") == {"x": 1}
    assert unwrap({"x": 1}, "views") == {"x": 1}
    assert unwrap([1, 2], "records") == [1, 2]


def test_save_json_keeps_unicode(tmp_path):
    path = save_json({"name": "案件管理"}, structure_filename(51, "settings", preview=True), tmp_path / "out")

    assert path.name == "app_51_settings_preview.json"
    text = path.read_text(encoding="utf-8")
    assert "案件管理" in text
    assert json.loads(text) == {"name": "案件管理"}
