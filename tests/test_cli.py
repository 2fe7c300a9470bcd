from __future__ import annotations

import importlib.util
import json
import pathlib

import pytest

from conftest import ACCOUNT, addr
from tokenscan.errors import FetchError, InvalidAddress
from tokenscan.models import ScanResult, TokenRecord
from tokenscan.state import ScanController

SCRIPT = pathlib.Path(__file__).resolve().parents[1] / "scripts" / "scan_approvals.py"

RESULT = ScanResult(
    account=ACCOUNT,
    tokens=(
        TokenRecord(address=addr(1), symbol="AAA", name="Alpha", balance="0"),
        TokenRecord(address=addr(2), symbol="BBB", name="Beta", balance="4"),
    ),
    proxy_address=addr(0xBEEF),
    to_block=10,
)


@pytest.fixture
def cli(monkeypatch):
    spec = importlib.util.spec_from_file_location("scan_approvals", SCRIPT)
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    monkeypatch.setattr(mod, "load_dotenv", lambda: None)
    return mod


def _controller(outcome):
    async def scan(account):
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return lambda config: ScanController(scan)


def test_text_output(cli, monkeypatch, capsys):
    monkeypatch.setattr(cli, "make_controller", _controller(RESULT))
    assert cli.main([ACCOUNT]) == 0
    out = capsys.readouterr().out
    assert out.index("AAA") < out.index("BBB")
    assert "Marketplace proxy" in out


def test_json_output_with_filters(cli, monkeypatch, capsys):
    monkeypatch.setattr(cli, "make_controller", _controller(RESULT))
    assert cli.main([ACCOUNT, "--json", "--non-zero-only"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert [t["symbol"] for t in data["tokens"]] == ["BBB"]
    assert data["proxy_address"] == addr(0xBEEF)


def test_exit_codes(cli, monkeypatch, capsys):
    monkeypatch.setattr(cli, "make_controller", _controller(InvalidAddress("0x1")))
    assert cli.main(["0x1"]) == 2
    monkeypatch.setattr(cli, "make_controller", _controller(FetchError("rpc down")))
    assert cli.main([ACCOUNT]) == 1
    assert "rpc down" in capsys.readouterr().err
