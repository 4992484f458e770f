import json

from baselinegate.cli import discover_files, main
from baselinegate.runtime.supervisor import EXIT_CONFIG_ERROR, EXIT_FAILURE, EXIT_OK

from fixtures.web_sources import GRID_CSS, WEB_FEATURES


def _project(tmp_path):
    src = tmp_path / "src"
    (src / "node_modules").mkdir(parents=True)
    (src / "styles.css").write_text(GRID_CSS, encoding="utf-8")
    (src / "card.css").write_text(".card:has(img) { color: red; }", encoding="utf-8")
    (src / "notes.txt").write_text("display: grid", encoding="utf-8")
    (src / "node_modules" / "vendor.css").write_text(".v { anchor-name: --x; }", encoding="utf-8")
    snapshot = tmp_path / "snapshot.json"
    snapshot.write_text(json.dumps({"features": WEB_FEATURES}), encoding="utf-8")
    return src, snapshot


def test_discover_files_skips_vendor_directories(tmp_path):
    src, _ = _project(tmp_path)

    files = discover_files([str(src)], [".css"])

    assert [f.name for f in files] == ["card.css", "styles.css"]


def test_warnings_pass(tmp_path, capsys):
    src, snapshot = _project(tmp_path)

    code = main([str(src), "--snapshot", str(snapshot)])

    assert code == EXIT_OK
    out = capsys.readouterr().out
    assert "PASSED_WITH_WARNINGS" in out
    assert "card.css:1:1" in out


def test_policy_can_fail_the_gate(tmp_path, capsys):
    src, snapshot = _project(tmp_path)
    policy = tmp_path / "policy.json"
    policy.write_text(json.dumps({"severityThresholds": {"newly": "error"}}), encoding="utf-8")

    code = main([str(src), "--snapshot", str(snapshot), "--policy", str(policy), "--json"])

    assert code == EXIT_FAILURE
    report = json.loads(capsys.readouterr().out)
    assert report["status"] == "FAILED"
    assert [v["feature_id"] for v in report["violations"]] == ["has"]


def test_invalid_policy_exits_with_config_error(tmp_path, capsys):
    src, snapshot = _project(tmp_path)
    policy = tmp_path / "policy.json"
    policy.write_text(json.dumps({"enforcementMode": "strict"}), encoding="utf-8")

    code = main([str(src), "--snapshot", str(snapshot), "--policy", str(policy)])

    assert code == EXIT_CONFIG_ERROR
    assert "enforcementMode" in capsys.readouterr().err


def test_missing_files_are_reported_not_fatal(tmp_path, capsys):
    _, snapshot = _project(tmp_path)

    code = main([str(tmp_path / "absent.css"), "--snapshot", str(snapshot)])

    assert code == EXIT_OK
    assert "FileNotFoundError" in capsys.readouterr().out
