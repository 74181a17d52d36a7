from __future__ import annotations

from typer.testing import CliRunner

from ibsparse import cli
from ibsparse.core.catalog import ProductCatalog, default_catalog
from ibsparse.core.model import ScanRecord
from ibsparse.core.service import BeaconService


class FakeScanTransport:
    def scan(self, *, timeout_s: float = 5.0) -> list[ScanRecord]:
        return [
            ScanRecord(
                mac="0C:61:CF:C1:4A:7E",
                rssi=-58,
                local_name=None,
                manufacturer_data=bytes.fromhex("0D0083BC280100AAAA7200000013090000"),
                service_data=(),
            )
        ]


class FakeService(BeaconService):
    def __init__(self) -> None:
        super().__init__(catalog=default_catalog(), scan_transport=FakeScanTransport())


runner = CliRunner()


def test_payload_command(monkeypatch):
    monkeypatch.setattr(cli, "BeaconService", FakeService)
    result = runner.invoke(cli.app, ["payload", "02010612FF0D0083BC4D0120AAAA05000000020A0600"])
    assert result.exit_code == 0
    assert "model: iBS02IR2" in result.stdout
    assert "counter: 5" in result.stdout
    assert "ir: True" in result.stdout


def test_msd_command_accepts_many(monkeypatch):
    monkeypatch.setattr(cli, "BeaconService", FakeService)
    result = runner.invoke(
        cli.app,
        ["msd", "590080BC360101FFFFFFFFFFFFFFFFFFFF", "0D0083BC280100AAAA7200000013090000"],
    )
    assert result.exit_code == 0
    lines = result.stdout.strip().splitlines()
    assert "model: iBS01" in lines[0]
    assert "range: 114" in lines[1]


def test_message_command(monkeypatch):
    monkeypatch.setattr(cli, "BeaconService", FakeService)
    result = runner.invoke(
        cli.app,
        ["message", "$GPRP,0C61CFC14A7E,E3C833A31F5D,-64,02010612FF0D0083BC280100AAAA7200000013090000,1578646387"],
    )
    assert result.exit_code == 0
    assert "GPRP 0C61CFC14A7E via E3C833A31F5D rssi=-64" in result.stdout
    assert "time: 2020-01-10T08:53:07+00:00" in result.stdout
    assert "model: iBS03R" in result.stdout


def test_products_command(monkeypatch):
    monkeypatch.setattr(cli, "BeaconService", FakeService)
    result = runner.invoke(cli.app, ["products"])
    assert result.exit_code == 0
    assert "ibs_common: 0xBC83" in result.stdout
    assert "0x13 iBS03R" in result.stdout
    assert "rg: 0xBC81" in result.stdout
    assert "any vendor" in result.stdout


def test_scan_command(monkeypatch):
    monkeypatch.setattr(cli, "BeaconService", FakeService)
    result = runner.invoke(cli.app, ["scan", "--timeout", "0.1"])
    assert result.exit_code == 0
    assert "0C:61:CF:C1:4A:7E rssi=-58" in result.stdout
    assert "range: 114" in result.stdout


def test_truncated_payload_is_reported(monkeypatch):
    monkeypatch.setattr(cli, "BeaconService", FakeService)
    result = runner.invoke(cli.app, ["msd", "0D0081BC3E110A00"])
    assert result.exit_code == 0
    assert "<truncated:" in result.stdout


def test_bad_hex_error_is_clean(monkeypatch):
    monkeypatch.setattr(cli, "BeaconService", FakeService)
    result = runner.invoke(cli.app, ["msd", "0D0"])
    assert result.exit_code == 1
    assert "Error: manufacturer data must have even-length hex" in result.stderr
    assert "Traceback" not in result.stdout
    assert "Traceback" not in result.stderr


def test_bad_message_error_is_clean(monkeypatch):
    monkeypatch.setattr(cli, "BeaconService", FakeService)
    result = runner.invoke(cli.app, ["message", "not a gateway line"])
    assert result.exit_code == 1
    assert "Error: Invalid gateway message" in result.stderr


def test_load_warning_is_printed(monkeypatch):
    class WarnService(FakeService):
        def __init__(self) -> None:
            catalog = default_catalog()
            BeaconService.__init__(
                self,
                catalog=ProductCatalog(
                    families=catalog.families,
                    warnings=("User product family 'rg' overrides packaged definition",),
                ),
                scan_transport=FakeScanTransport(),
            )

    monkeypatch.setattr(cli, "BeaconService", WarnService)
    result = runner.invoke(cli.app, ["products"])
    assert result.exit_code == 0
    assert "Warning: User product family 'rg' overrides packaged definition" in result.stderr
