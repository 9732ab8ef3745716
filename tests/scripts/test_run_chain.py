from __future__ import annotations

import json
import sys

import pytest

from scripts import run_chain


def _run_main(monkeypatch, *argv: str) -> int:
    monkeypatch.setattr(sys, "argv", ["run_chain.py", *argv])
    with pytest.raises(SystemExit) as excinfo:
        run_chain.main()
    return excinfo.value.code


def test_local_run_commits_over_threshold(monkeypatch, capsys) -> None:
    # Act
    code = _run_main(monkeypatch, "run", "--total", "12000", "--latency-sec", "0")

    # Assert
    out = capsys.readouterr().out
    assert code == run_chain.EXIT_COMMITTED
    assert "Status: committed" in out
    assert '"gift_variant_id": 123456789' in out


def test_local_run_stops_below_threshold(monkeypatch, capsys) -> None:
    code = _run_main(monkeypatch, "run", "--total", "5000", "--latency-sec", "0")

    out = capsys.readouterr().out
    assert code == run_chain.EXIT_STOPPED
    assert "Status: stopped" in out
    assert "Cart:" not in out


def test_local_run_with_cart_file(monkeypatch, capsys, tmp_path) -> None:
    cart_file = tmp_path / "cart.json"
    cart_file.write_text(json.dumps({"token": "file-cart", "total_price": 30000, "items": []}), encoding="utf-8")

    code = _run_main(monkeypatch, "run", "--cart-file", str(cart_file), "--latency-sec", "0")

    assert code == run_chain.EXIT_COMMITTED
    assert '"token": "file-cart"' in capsys.readouterr().out


def test_invalid_cart_file_is_error(monkeypatch, capsys, tmp_path) -> None:
    cart_file = tmp_path / "cart.json"
    cart_file.write_text("[1, 2]", encoding="utf-8")

    code = _run_main(monkeypatch, "run", "--cart-file", str(cart_file))

    assert code == run_chain.EXIT_ERROR
    assert "ERROR: cart must be a JSON object" in capsys.readouterr().out


def test_cart_file_with_numeric_token_is_error(monkeypatch, capsys, tmp_path) -> None:
    cart_file = tmp_path / "cart.json"
    cart_file.write_text(json.dumps({"token": 123, "total_price": 1}), encoding="utf-8")

    code = _run_main(monkeypatch, "run", "--cart-file", str(cart_file), "--latency-sec", "0")

    assert code == run_chain.EXIT_ERROR
    assert "ERROR: Cart token must be a string" in capsys.readouterr().out


def test_api_run_posts_total(monkeypatch, capsys) -> None:
    # Arrange
    captured = {}

    class DummyResponse:
        status_code = 200

        def json(self):
            return {"run_id": "run-123", "success": True, "committed": False, "status": "stopped"}

    def fake_post(url, json, timeout):
        captured["url"] = url
        captured["json"] = json
        captured["timeout"] = timeout
        return DummyResponse()

    monkeypatch.setattr(run_chain.requests, "post", fake_post)

    # Act
    code = _run_main(monkeypatch, "run", "--total", "5000", "--api-base-url", "http://localhost:8000/")

    # Assert
    assert captured["url"] == "http://localhost:8000/chains/gift/runs"
    assert captured["json"] == {"total_price": 5000}
    assert captured["timeout"] == run_chain.DEFAULT_API_TIMEOUT_SEC
    assert code == run_chain.EXIT_STOPPED


def test_logs_passes_event_filter(monkeypatch, capsys) -> None:
    captured = {}

    class DummyResponse:
        def raise_for_status(self):
            return None

        def json(self):
            return [{"event": "step.failed"}]

    def fake_get(url, params, timeout):
        captured["url"] = url
        captured["params"] = params
        return DummyResponse()

    monkeypatch.setattr(run_chain.requests, "get", fake_get)

    code = _run_main(
        monkeypatch,
        "logs",
        "--run-id",
        "run-1",
        "--api-base-url",
        "http://localhost:8000",
        "--event",
        "step.failed",
    )

    assert code == run_chain.EXIT_COMMITTED
    assert captured["url"] == "http://localhost:8000/runs/run-1/logs"
    assert captured["params"] == {"event": "step.failed"}


def test_no_command_prints_help(monkeypatch, capsys) -> None:
    assert _run_main(monkeypatch) == run_chain.EXIT_ERROR
