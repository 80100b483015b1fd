import json

from analyze import main
from gacha.game_schemas import build_default_registry
from gacha.uigf_codec import flatten, import_container, load_container


def _write(path, data):
    path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    return str(path)


def _v4():
    items = [
        {"uigf_gacha_type": "301", "gacha_type": "301", "item_id": "", "count": "1",
         "time": f"2024-01-01 10:{n:02d}:00", "name": "Furina" if n == 9 else "Cool Steel",
         "item_type": "角色", "rank_type": "5" if n == 9 else "3", "id": f"17040672000000{n:05d}"}
        for n in range(10)
    ]
    return {
        "info": {"export_timestamp": 1704067200, "export_app": "a", "export_app_version": "v1", "version": "v4.0"},
        "hk4e": [{"uid": "800000001", "timezone": 8, "lang": "zh-cn", "list": items}],
    }


def _legacy():
    return {
        "info": {"uid": "800000001", "lang": "zh-cn", "export_app": "a", "uigf_version": "v2.2"},
        "list": [{"gacha_type": "301", "time": "2024-01-01 10:00:00", "name": "Furina", "rank_type": "5"}],
    }


def test_validate_ok(tmp_path, capsys):
    assert main(["validate", _write(tmp_path / "a.json", _v4())]) == 0
    assert "is valid" in capsys.readouterr().out


def test_validate_reports_paths(tmp_path, capsys):
    code = main(["validate", _write(tmp_path / "legacy.json", _legacy())])
    assert code == 1
    assert "info.export_app_version is missing" in capsys.readouterr().out


def test_report_json(tmp_path, capsys):
    assert main(["report", _write(tmp_path / "a.json", _v4()), "--json"]) == 0
    reports = json.loads(capsys.readouterr().out)
    assert reports[0]["uid"] == "800000001"
    assert reports[0]["stats"]["total_pulls"] == 10
    assert reports[0]["banners"][0]["events"][0]["distance"] == 10


def test_report_text(tmp_path, capsys):
    assert main(["report", _write(tmp_path / "a.json", _v4())]) == 0
    out = capsys.readouterr().out
    assert "800000001" in out
    assert "ACHIEVEMENTS" in out


def test_migrate_and_csv(tmp_path):
    source = _write(tmp_path / "a.json", _v4())
    out = tmp_path / "migrated.json"
    assert main(["migrate", source, "-o", str(out)]) == 0
    records = flatten(import_container(load_container(out), build_default_registry()))
    assert len(records) == 10

    csv_path = tmp_path / "a.csv"
    assert main(["to-csv", source, "-o", str(csv_path)]) == 0
    assert main(["report", str(csv_path), "--game", "genshin", "--json"]) == 0


def test_gacha_errors_exit_nonzero(tmp_path, capsys):
    data = _v4()
    data["info"]["version"] = "v9.0"
    assert main(["report", _write(tmp_path / "a.json", data)]) == 1
    assert "unsupported" in capsys.readouterr().out
