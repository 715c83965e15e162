"""Tests for imagetool CLI helpers."""
import io
import logging
import os
from unittest.mock import AsyncMock

import httpx
import pytest
from PIL import Image

from imagetool import cli
from imagetool.cli import (
    CLIError,
    _build_config,
    _load_env_file,
    _resolve_base_url,
    _setup_logging,
    run_cli,
)
from imagetool.models import DEFAULT_BASE_URL, Operation, ResponseShape
from imagetool.orchestrator import UploadOrchestrator


def _write_png(path):
    buffer = io.BytesIO()
    Image.new("RGB", (2, 2)).save(buffer, format="PNG")
    path.write_bytes(buffer.getvalue())
    return path


def test_resolve_base_url(monkeypatch):
    monkeypatch.delenv("IMAGETOOL_BASE_URL", raising=False)
    assert _resolve_base_url(None) == DEFAULT_BASE_URL
    assert _resolve_base_url("https://svc.example/") == "https://svc.example"

    monkeypatch.setenv("IMAGETOOL_BASE_URL", "http://localhost:5000")
    assert _resolve_base_url(None) == "http://localhost:5000"
    assert _resolve_base_url("https://svc.example") == "https://svc.example"

    with pytest.raises(CLIError):
        _resolve_base_url("svc.example")


def test_load_env_file(tmp_path, monkeypatch):
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join(
            [
                "# service",
                "export IMAGETOOL_BASE_URL='http://127.0.0.1:5000'",
                "IMAGETOOL_OTHER=value",
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.delenv("IMAGETOOL_BASE_URL", raising=False)
    monkeypatch.delenv("IMAGETOOL_OTHER", raising=False)

    _load_env_file(env_path)

    assert os.environ["IMAGETOOL_BASE_URL"] == "http://127.0.0.1:5000"
    assert os.environ["IMAGETOOL_OTHER"] == "value"


def test_load_env_file_missing(tmp_path):
    with pytest.raises(CLIError, match="not found"):
        _load_env_file(tmp_path / "missing.env")


def test_build_config_binary_response():
    config = _build_config("https://svc.example", True, 30.0, 6.0)
    assert config.shape_for(Operation.REMOVE_BACKGROUND) is ResponseShape.BINARY
    assert config.shape_for(Operation.ENHANCE_QUALITY) is ResponseShape.JSON_PATH
    assert config.request_timeout == 30.0

    config = _build_config("https://svc.example", False, None, 6.0)
    assert config.shape_for(Operation.REMOVE_BACKGROUND) is ResponseShape.JSON_PATH
    assert config.request_timeout is None


def test_setup_logging_defaults_to_silent():
    mode = _setup_logging(debug=False, silent=False, log_level=None)
    assert mode == "silent"
    assert logging.getLogger().isEnabledFor(logging.ERROR) is False
    logging.disable(logging.NOTSET)


def test_setup_logging_debug_mode():
    mode = _setup_logging(debug=True, silent=False, log_level=None)
    assert mode == "DEBUG"
    assert logging.getLogger().isEnabledFor(logging.DEBUG) is True
    logging.disable(logging.NOTSET)


def test_run_cli_without_source_prints_help(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert run_cli([]) == 0
    assert "usage: imagetool" in capsys.readouterr().out
    logging.disable(logging.NOTSET)


def test_run_cli_missing_source(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert run_cli([str(tmp_path / "missing.png")]) == 1
    assert "source is not a file" in capsys.readouterr().err
    logging.disable(logging.NOTSET)


def test_run_cli_rejects_non_image(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    notes = tmp_path / "notes.txt"
    notes.write_text("not media")

    assert run_cli([str(notes), "-u", "https://svc.example"]) == 1
    assert "Unsupported file type" in capsys.readouterr().err
    logging.disable(logging.NOTSET)


@pytest.mark.parametrize(
    "side_effect, expected",
    [
        (None, 0),
        (httpx.ConnectError("refused"), 1),
    ],
)
def test_run_cli_processes_image(tmp_path, monkeypatch, side_effect, expected):
    monkeypatch.chdir(tmp_path)
    source = _write_png(tmp_path / "photo.png")
    client = AsyncMock()
    client.post_image.return_value = httpx.Response(200, json={"processed_image_url": "/r/1.png"})
    client.post_image.side_effect = side_effect
    monkeypatch.setattr(
        cli,
        "UploadOrchestrator",
        lambda config: UploadOrchestrator(config, client=client),
    )

    code = run_cli([str(source), "-o", "enhance-quality", "-u", "https://svc.example"])

    assert code == expected
    endpoint, image = client.post_image.await_args.args
    assert endpoint == "/upload"
    assert image.filename == "photo.png"
    assert image.media_type == "image/png"
    logging.disable(logging.NOTSET)


def _patch_session(monkeypatch, response):
    client = AsyncMock()
    client.post_image.return_value = response
    monkeypatch.setattr(
        cli,
        "UploadOrchestrator",
        lambda config: UploadOrchestrator(config, client=client),
    )
    return client


def test_run_cli_writes_binary_result_next_to_source(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    source = _write_png(tmp_path / "photo.png")
    _patch_session(
        monkeypatch,
        httpx.Response(200, content=b"cutout-bytes", headers={"content-type": "image/png"}),
    )

    code = run_cli([str(source), "--binary-response", "-u", "https://svc.example"])

    assert code == 0
    written = tmp_path / "photo-remove-background.png"
    assert written.read_bytes() == b"cutout-bytes"
    out = capsys.readouterr().out
    assert "blob:" not in out
    assert "photo.png" in out
    logging.disable(logging.NOTSET)


def test_run_cli_writes_binary_result_to_output(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    source = _write_png(tmp_path / "photo.png")
    target = tmp_path / "out"
    target.mkdir()
    _patch_session(
        monkeypatch,
        httpx.Response(200, content=b"cutout-bytes", headers={"content-type": "image/png"}),
    )

    code = run_cli(
        [str(source), "--binary-response", "--output", str(target / "result.png"), "-u", "https://svc.example"]
    )

    assert code == 0
    assert (target / "result.png").read_bytes() == b"cutout-bytes"
    assert not (tmp_path / "photo-remove-background.png").exists()
    logging.disable(logging.NOTSET)


def test_run_cli_unwritable_output_fails(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    source = _write_png(tmp_path / "photo.png")
    _patch_session(
        monkeypatch,
        httpx.Response(200, content=b"cutout-bytes", headers={"content-type": "image/png"}),
    )

    code = run_cli(
        [str(source), "--binary-response", "--output", str(tmp_path / "missing" / "r.png"), "-u", "https://svc.example"]
    )

    assert code == 1
    assert "could not write" in capsys.readouterr().err
    logging.disable(logging.NOTSET)


def test_run_cli_prints_hosted_result_url(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    source = _write_png(tmp_path / "photo.png")
    _patch_session(monkeypatch, httpx.Response(200, json={"processed_image_url": "/r/1.png"}))

    code = run_cli([str(source), "-u", "https://svc.example"])

    assert code == 0
    assert "https://svc.example/r/1.png" in capsys.readouterr().out
    assert sorted(p.name for p in tmp_path.iterdir()) == ["photo.png"]
    logging.disable(logging.NOTSET)
