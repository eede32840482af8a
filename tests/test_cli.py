"""Test 42: CLI configuration report."""

from __future__ import annotations

from click.testing import CliRunner

from dpp_relay.cli import cli


# ── Test 42: status prints the resolved configuration ─────────────


def test_status_reports_resolved_config(tmp_path, monkeypatch):
    """File values and env overrides both show up in the report."""
    path = tmp_path / "relay.toml"
    path.write_text(
        '[ledger]\ncontract_address = "0x0000000000000000000000000000000000000001"\n'
    )
    monkeypatch.setenv("DPP_RELAY_PORT", "9100")
    monkeypatch.setenv("DPP_RELAY_SHUTDOWN_GRACE", "7")

    result = CliRunner().invoke(cli, ["-c", str(path), "status"])

    assert result.exit_code == 0, result.output
    assert ":9100" in result.output
    assert "0x0000000000000000000000000000000000000001" in result.output
    assert "Start block:     (head)" in result.output
    assert "Shutdown grace:  7.0s" in result.output
