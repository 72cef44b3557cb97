"""
CLI integration tests using Click's test runner.

The Thor client is patched with the in-memory node from conftest, so no
network access is needed.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from clausewright.cli import VERSION, cli
from clausewright.pneuma.clause import Clause
from clausewright.pneuma.contract import Contract
from clausewright.pneuma.receipt import OutcomePoller
from clausewright.pneuma.tx import transact
from clausewright.utils import keccak256

TOPIC_SET_A = keccak256(b"SetA(uint256)")


class NodeSession:
    """Context-manager shim so the in-memory node can stand in for ThorClient."""

    def __init__(self, node: Any) -> None:
        self.node = node

    def __enter__(self) -> Any:
        return self.node

    def __exit__(self, *exc_info) -> None:
        return None


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def artifact(tmp_path: Path, a_abi, a_bytecode) -> Path:
    path = tmp_path / "A.json"
    path.write_text(json.dumps({"abi": a_abi, "bytecode": a_bytecode}), encoding="utf-8")
    return path


@pytest.fixture()
def patched_node(thor: Any):
    with patch("clausewright.cli.ThorClient", lambda **kwargs: NodeSession(thor)):
        yield thor


def _deploy(thor: Any, artifact: Path, value: int = 100) -> tuple[str, str]:
    poller = OutcomePoller(thor, max_attempts=1, interval=0, sleep=lambda s: None)
    receipt = transact(thor, poller, [Contract.from_artifact(artifact).deploy(0, value)])
    return receipt.tx_id, receipt.outputs[0].contract_address


class TestVersionAndInfo:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert VERSION in result.output

    def test_info(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["info"], env={"THOR_NODE_URL": "http://solo.test:8669/"})
        assert result.exit_code == 0
        assert "http://solo.test:8669/" in result.output
        assert "Poll attempts" in result.output


class TestReceipt:
    def test_prints_receipt(self, runner: CliRunner, patched_node: Any, artifact: Path) -> None:
        tx_id, address = _deploy(patched_node, artifact)
        result = runner.invoke(cli, ["receipt", tx_id, "--interval", "0"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["meta"]["txID"] == tx_id
        assert payload["outputs"][0]["contractAddress"] == address

    def test_reverted_exits_nonzero(self, runner: CliRunner, patched_node: Any, artifact: Path) -> None:
        _, address = _deploy(patched_node, artifact)
        poller = OutcomePoller(patched_node, max_attempts=1, interval=0, sleep=lambda s: None)
        set_data = Contract.from_artifact(artifact, address=address).send("set", 0, 1).data
        bad = Clause(to="0x" + "00" * 20, data=set_data)
        receipt = transact(patched_node, poller, [bad])

        result = runner.invoke(cli, ["receipt", receipt.tx_id, "--interval", "0"])
        assert result.exit_code == 1
        assert "FAILED: Transaction reverted" in result.output

    def test_timeout_exit_code(self, runner: CliRunner, patched_node: Any) -> None:
        result = runner.invoke(cli, ["receipt", "0x" + "11" * 32, "--attempts", "2", "--interval", "0"])
        assert result.exit_code == 5
        assert len(patched_node.queries) == 2

    def test_zero_attempts_rejected(self, runner: CliRunner, patched_node: Any) -> None:
        result = runner.invoke(cli, ["receipt", "0x" + "11" * 32, "--attempts", "0", "--interval", "0"])
        assert result.exit_code == 2
        assert "at least 1" in result.output
        assert patched_node.queries == []

    def test_malformed_tx_id(self, runner: CliRunner, patched_node: Any) -> None:
        result = runner.invoke(cli, ["receipt", "0x1234"])
        assert result.exit_code == 2
        assert patched_node.queries == []


class TestCall:
    def test_call_prints_value(self, runner: CliRunner, patched_node: Any, artifact: Path) -> None:
        _, address = _deploy(patched_node, artifact, value=300)
        result = runner.invoke(cli, ["call", str(artifact), address, "a"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == 300

    def test_unknown_function(self, runner: CliRunner, patched_node: Any, artifact: Path) -> None:
        _, address = _deploy(patched_node, artifact)
        result = runner.invoke(cli, ["call", str(artifact), address, "nonexistent"])
        assert result.exit_code == 3
        assert patched_node.calls == []


class TestDecode:
    def test_decode_event(self, runner: CliRunner, artifact: Path) -> None:
        result = runner.invoke(
            cli,
            [
                "decode", str(artifact), "SetA",
                "--topic", "0x" + TOPIC_SET_A.hex(),
                "--data", "0x" + (200).to_bytes(32, "big").hex(),
            ],
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["args"] == {"0": 200, "val": 200}

    def test_wrong_event(self, runner: CliRunner, artifact: Path) -> None:
        result = runner.invoke(cli, ["decode", str(artifact), "SetA", "--topic", "0x" + "00" * 32])
        assert result.exit_code == 3
        assert "does not match" in result.output
