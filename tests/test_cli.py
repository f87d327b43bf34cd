from __future__ import annotations

from typer.testing import CliRunner

from pinctl import cli
from pinctl.core.model import (
    CharacteristicMap,
    DeviceProfile,
    PinReading,
    ScanResult,
    SessionFailure,
    SessionOutcome,
    SessionState,
)

SENSOR = ScanResult(name="Sensor1", address="AA:BB:CC:11:22:33", rssi=-52)


class FakeService:
    def __init__(self) -> None:
        self.load_warnings = ()
        self.calls: list[tuple] = []
        self.profiles = {
            "esp32_pins": DeviceProfile(
                id="esp32_pins",
                name="ESP32 BLE pin controller",
                device_name=None,
                scan_timeout_s=30.0,
                characteristics=CharacteristicMap(
                    write="c79b2ca7-f39d-4060-8168-816fa26737b7",
                    telemetry="01037594-1bbb-4490-aa4d-f6d333b42e16",
                    pin_state="13c0ef83-09bd-4767-97cb-ee46224ae6db",
                ),
            )
        }

    def list_profiles(self):
        return list(self.profiles.values())

    def scan_devices(self, timeout_s, profile_id=None):
        return [SENSOR, ScanResult(name="", address="11:22:33:44:55:66", rssi=-90)]

    def read_pins(self, device_name=None, *, frame="telemetry", profile_id=None, timeout_s=None,
                  characteristic_uuid=None, observer=None):
        self.calls.append(("read", device_name, frame, timeout_s))
        return SessionOutcome(
            state=SessionState.DONE,
            history=(SessionState.DONE,),
            device=SENSOR,
            service_uuid="a9c81b72-0f7a-4c59-b0a8-425e3bcf0a0e",
            characteristic_uuid="01037594-1bbb-4490-aa4d-f6d333b42e16",
            readings=(PinReading(5, 10), PinReading(7, 300)),
        )

    def write_pins(self, entries, device_name=None, *, profile_id=None, timeout_s=None,
                   characteristic_uuid=None, observer=None):
        self.calls.append(("write", device_name, tuple(entries), timeout_s))
        return SessionOutcome(
            state=SessionState.DONE,
            history=(SessionState.DONE,),
            device=SENSOR,
            service_uuid="a9c81b72-0f7a-4c59-b0a8-425e3bcf0a0e",
            characteristic_uuid="c79b2ca7-f39d-4060-8168-816fa26737b7",
            bytes_written=41,
            disconnect_error="link already gone",
        )


runner = CliRunner()


def test_profiles_command(monkeypatch):
    monkeypatch.setattr(cli, "PinctlService", FakeService)
    result = runner.invoke(cli.app, ["profiles"])
    assert result.exit_code == 0
    assert "esp32_pins: ESP32 BLE pin controller" in result.stdout
    assert "write: c79b2ca7-f39d-4060-8168-816fa26737b7" in result.stdout


def test_scan_command(monkeypatch):
    monkeypatch.setattr(cli, "PinctlService", FakeService)
    result = runner.invoke(cli.app, ["scan", "--timeout", "1"])
    assert result.exit_code == 0
    assert "AA:BB:CC:11:22:33 Sensor1 (-52 dBm)" in result.stdout
    assert "<unnamed>" in result.stdout


def test_read_command(monkeypatch):
    monkeypatch.setattr(cli, "PinctlService", FakeService)
    result = runner.invoke(cli.app, ["read", "Sensor1", "--timeout", "10"])
    assert result.exit_code == 0
    assert "Device: Sensor1 (AA:BB:CC:11:22:33, -52 dBm)" in result.stdout
    assert "pin 5: 10" in result.stdout
    assert "pin 7: 300" in result.stdout


def test_read_command_rejects_unknown_frame(monkeypatch):
    monkeypatch.setattr(cli, "PinctlService", FakeService)
    result = runner.invoke(cli.app, ["read", "Sensor1", "--frame", "bogus"])
    assert result.exit_code == 2
    assert "Unknown frame 'bogus'" in result.stderr


def test_write_command(monkeypatch):
    monkeypatch.setattr(cli, "PinctlService", FakeService)
    result = runner.invoke(cli.app, ["write", "Sensor1", "--pin", "14=100", "-p", "26=0"])
    assert result.exit_code == 0
    assert "Wrote 41 byte(s): 14=100, 26=0" in result.stdout
    assert "Warning: link already gone" in result.stderr


def test_write_command_rejects_bad_assignment(monkeypatch):
    monkeypatch.setattr(cli, "PinctlService", FakeService)
    result = runner.invoke(cli.app, ["write", "Sensor1", "--pin", "fourteen"])
    assert result.exit_code == 1
    assert "Error: Invalid pin assignment 'fourteen'" in result.stderr


def test_session_failure_is_clean(monkeypatch):
    class FailingService(FakeService):
        def read_pins(self, device_name=None, **kwargs):
            from pinctl.core.errors import ScanTimeout, SessionError

            error = ScanTimeout("Device 'Sensor1' not found after 30 seconds")
            raise SessionError(SessionFailure(phase=SessionState.SCANNING, error=error))

    monkeypatch.setattr(cli, "PinctlService", FailingService)
    result = runner.invoke(cli.app, ["read", "Sensor1"])
    assert result.exit_code == 1
    assert "Error: Scanning failed: Device 'Sensor1' not found after 30 seconds" in result.stderr
    assert "Traceback" not in result.stdout
    assert "Traceback" not in result.stderr


def test_load_warning_is_printed(monkeypatch):
    class WarnService(FakeService):
        def __init__(self) -> None:
            super().__init__()
            self.load_warnings = ("User profile 'esp32_pins' overrides packaged profile",)

    monkeypatch.setattr(cli, "PinctlService", WarnService)
    result = runner.invoke(cli.app, ["profiles"])
    assert result.exit_code == 0
    assert "Warning: User profile 'esp32_pins' overrides packaged profile" in result.stderr
