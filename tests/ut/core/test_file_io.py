"""file_io 读写工具单元测试"""

from __future__ import annotations

import json

from fur.utils.file_io import atomic_write, load_json, load_yaml, save_json


def test_save_json_is_indented_utf8(tmp_path) -> None:
    path = tmp_path / "sub" / "furconfig.json"
    save_json(path, {"name": "工具", "dependencies": ["a"]})
    text = path.read_text(encoding="utf-8")
    assert "工具" in text
    assert '\n  "dependencies"' in text
    assert json.loads(text)["dependencies"] == ["a"]


def test_save_json_overwrites(tmp_path) -> None:
    path = tmp_path / "f.json"
    save_json(path, {"v": 1})
    save_json(path, {"v": 2})
    assert load_json(path) == {"v": 2}
    assert not list(tmp_path.glob("*.tmp"))


def test_load_json_missing_and_non_object(tmp_path) -> None:
    assert load_json(tmp_path / "none.json") is None
    (tmp_path / "list.json").write_text("[1, 2]", encoding="utf-8")
    assert load_json(tmp_path / "list.json") is None


def test_load_yaml_non_dict(tmp_path) -> None:
    atomic_write(tmp_path / "a.yml", "- 1\n- 2\n")
    assert load_yaml(tmp_path / "a.yml") == {}
    assert load_yaml(tmp_path / "missing.yml") == {}
