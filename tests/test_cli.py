import pytest
from typer.testing import CliRunner

from excalidraw_share import cli
from excalidraw_share.settings import ENV_VARS

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for env_name in ENV_VARS.values():
        monkeypatch.delenv(env_name, raising=False)


def test_serve_builds_app_and_runs_uvicorn(monkeypatch, tmp_path):
    calls = []

    def fake_run(app, host, port, log_level):
        calls.append({"app": app, "host": host, "port": port, "log_level": log_level})

    monkeypatch.setattr(cli.uvicorn, "run", fake_run)
    data_dir = tmp_path / "drawings"

    result = runner.invoke(
        cli.app,
        ["--api-key", "secret", "--data-dir", str(data_dir), "--listen-addr", "0.0.0.0:9000"],
    )

    assert result.exit_code == 0, result.output
    assert calls[0]["host"] == "0.0.0.0"
    assert calls[0]["port"] == 9000
    assert calls[0]["log_level"] == "info"
    assert data_dir.is_dir()


def test_serve_reads_api_key_from_environment(monkeypatch, tmp_path):
    monkeypatch.setattr(cli.uvicorn, "run", lambda *args, **kwargs: None)
    monkeypatch.setenv("API_KEY", "env-secret")
    monkeypatch.setenv("DATA_DIR", str(tmp_path))

    result = runner.invoke(cli.app, [])

    assert result.exit_code == 0, result.output


def test_serve_without_api_key_fails(monkeypatch, tmp_path):
    monkeypatch.setattr(cli.uvicorn, "run", lambda *args, **kwargs: pytest.fail("should not serve"))

    result = runner.invoke(cli.app, ["--data-dir", str(tmp_path)])

    assert result.exit_code == 2
