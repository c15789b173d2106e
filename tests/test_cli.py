"""Tests for the operational CLI."""

from uuid import uuid4

import pytest

from hrms_core.cli import HRMSCli


@pytest.fixture
def cli() -> HRMSCli:
    return HRMSCli()


class TestCliParser:
    def test_compliance_sweep_organization(self, cli: HRMSCli):
        org_id = uuid4()
        args = cli.parser.parse_args(["compliance-sweep", "--organization-id", str(org_id)])
        assert args.command == "compliance-sweep"
        assert args.organization_id == org_id

    def test_compliance_sweep_defaults_to_all(self, cli: HRMSCli):
        args = cli.parser.parse_args(["compliance-sweep"])
        assert args.organization_id is None

    def test_carry_forward_years(self, cli: HRMSCli):
        args = cli.parser.parse_args(["carry-forward", "--from-year", "2025", "--to-year", "2026"])
        assert (args.from_year, args.to_year) == (2025, 2026)

    def test_carry_forward_requires_years(self, cli: HRMSCli):
        with pytest.raises(SystemExit):
            cli.parser.parse_args(["carry-forward", "--from-year", "2025"])

    def test_invalid_organization_id(self, cli: HRMSCli):
        with pytest.raises(SystemExit):
            cli.parser.parse_args(["compliance-sweep", "--organization-id", "not-a-uuid"])

    def test_purge_retention(self, cli: HRMSCli):
        args = cli.parser.parse_args(["--log-level", "DEBUG", "purge-notifications"])
        assert args.log_level == "DEBUG"
        assert args.retention_days is None

    def test_no_command_prints_help(self, cli: HRMSCli, capsys):
        assert cli.run([]) == 1
        assert "compliance-sweep" in capsys.readouterr().out
