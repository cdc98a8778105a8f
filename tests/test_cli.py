import json
from pathlib import Path

from typer.testing import CliRunner

import unity_provision.utils.config as config_mod
from unity_provision import __version__
from unity_provision.cli.main import app

runner = CliRunner()


def _catalog(tmp_path: Path, *entries: str) -> Path:
    path = tmp_path / "releases.txt"
    path.write_text("\n".join(entries) + "\n", encoding="utf-8")
    return path


def test_version_flag():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_resolve_prints_best_release(tmp_path):
    catalog = _catalog(tmp_path, "2022.3.5f1", "2022.3.10f1", "2021.3.9f1")

    result = runner.invoke(app, ["version", "resolve", "2022.x", "--catalog", str(catalog)])

    assert result.exit_code == 0
    assert "2022.3.10f1" in result.output


def test_resolve_json_output(tmp_path):
    catalog = _catalog(tmp_path, "6000.0.1f1 (abcdef)")

    result = runner.invoke(
        app,
        ["version", "resolve", "6000.0", "-c", str(catalog), "--arch", "x86_64", "--json"],
    )

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data == {"requested": "6000.0", "version": "6000.0.1f1", "architecture": "x86_64"}


def test_resolve_no_match_exits_nonzero(tmp_path):
    catalog = _catalog(tmp_path, "2022.3.10f1")

    result = runner.invoke(app, ["version", "resolve", "2022.3.11f1", "-c", str(catalog)])

    assert result.exit_code == 1
    assert "No release matches 2022.3.11f1" in result.output


def test_resolve_reads_catalog_from_stdin():
    result = runner.invoke(
        app,
        ["version", "resolve", "2021", "-c", "-"],
        input="2021.3.1f1\n2021.3.9b1\n2021.3.4f1\n",
    )

    assert result.exit_code == 0
    assert "2021.3.4f1" in result.output


def test_resolve_uses_catalog_from_environment(monkeypatch, tmp_path):
    catalog = _catalog(tmp_path, "2023.2.20f1")
    monkeypatch.setenv(config_mod.CATALOG_ENV_VAR, str(catalog))

    result = runner.invoke(app, ["version", "resolve", "2023"])

    assert result.exit_code == 0
    assert "2023.2.20f1" in result.output


def test_resolve_without_catalog_fails():
    result = runner.invoke(app, ["version", "resolve", "2023"])

    assert result.exit_code == 1
    assert "No release catalog given" in result.output


def test_resolve_rejects_invalid_request(tmp_path):
    catalog = _catalog(tmp_path, "2022.3.10f1")

    result = runner.invoke(app, ["version", "resolve", "latest", "-c", str(catalog)])

    assert result.exit_code == 1
    assert "Invalid Unity version" in result.output


def test_resolve_rejects_unknown_channel(tmp_path):
    catalog = _catalog(tmp_path, "2022.3.10f1")

    result = runner.invoke(
        app, ["version", "resolve", "2022", "-c", str(catalog), "--channel", "z"]
    )

    assert result.exit_code == 1
    assert "Unknown release channel" in result.output


def test_check_command():
    ok = runner.invoke(app, ["version", "check", "2021.3.5f1", "2021.4.0f1"])
    bad = runner.invoke(app, ["version", "check", "2021.3.5f1", "2022.1.0f1"])
    invalid = runner.invoke(app, ["version", "check", "2021.3.5f1", "nope"])

    assert ok.exit_code == 0
    assert bad.exit_code == 1
    assert invalid.exit_code == 1


def test_project_command(tmp_path):
    settings = tmp_path / "ProjectSettings"
    settings.mkdir()
    (settings / "ProjectVersion.txt").write_text(
        "m_EditorVersionWithRevision: 6000.0.23f1 (1c4764c07fb4)\n"
    )

    result = runner.invoke(app, ["version", "project", str(tmp_path), "--json"])

    assert result.exit_code == 0
    assert json.loads(result.output) == {"version": "6000.0.23f1", "changeset": "1c4764c07fb4"}


def test_ensure_sdk_without_android_target(tmp_path):
    editor_root = tmp_path / "Editor"
    editor_root.mkdir()
    settings = tmp_path / "Project" / "ProjectSettings"
    settings.mkdir(parents=True)
    (settings / "ProjectSettings.asset").write_text("AndroidTargetSdkVersion: 0\n")

    result = runner.invoke(
        app, ["android", "ensure-sdk", str(editor_root), str(tmp_path / "Project"), "--json"]
    )

    assert result.exit_code == 0
    assert '"status": "not-configured"' in result.output


def test_ensure_sdk_already_present_uses_configured_android_dir(tmp_path):
    platform_dir = (
        tmp_path / "Editor" / "Data" / "PlaybackEngines" / "AndroidPlayer" / "SDK"
        / "platforms" / "android-34"
    )
    platform_dir.mkdir(parents=True)
    settings = tmp_path / "Project" / "ProjectSettings"
    settings.mkdir(parents=True)
    (settings / "ProjectSettings.asset").write_text("AndroidTargetSdkVersion: 34\n")
    android_home = tmp_path / "android-home"
    config_mod.CONFIG_FILE.write_text(json.dumps({"android_config_dir": str(android_home)}))
    config_mod.reload_config()

    result = runner.invoke(
        app, ["android", "ensure-sdk", str(tmp_path / "Editor"), str(tmp_path / "Project")]
    )

    assert result.exit_code == 0
    assert "already installed" in result.output
    assert (android_home / "repositories.cfg").read_text() == ""


def test_ensure_sdk_reports_missing_tools(tmp_path):
    (tmp_path / "Editor" / "Data" / "PlaybackEngines" / "AndroidPlayer").mkdir(parents=True)
    settings = tmp_path / "Project" / "ProjectSettings"
    settings.mkdir(parents=True)
    (settings / "ProjectSettings.asset").write_text("AndroidTargetSdkVersion: 34\n")
    config_mod.CONFIG_FILE.write_text(
        json.dumps({"android_config_dir": str(tmp_path / "android-home")})
    )
    config_mod.reload_config()

    result = runner.invoke(
        app, ["android", "ensure-sdk", str(tmp_path / "Editor"), str(tmp_path / "Project")]
    )

    assert result.exit_code == 1
    assert "Required tool not found" in result.output
