"""Tests for the device registry."""

from pathlib import Path

import pytest

from wolweb.core.registry import (
    ConfigLoadError,
    DeviceEntry,
    DeviceRegistry,
    RegistryHandle,
    load_registry,
    parse_registry,
)

SAMPLE = """\
# key,display,mac,broadcast
desk,Office Desktop,AA:BB:CC:DD:EE:01,192.168.1.255

nas,Home NAS,AA:BB:CC:DD:EE:03
   # indented comment
htpc,"Living Room, HTPC",aa-bb-cc-dd-ee-05,10.0.0.255
"""


def _write(tmp_path: Path, text: str, name: str = "devices.csv") -> Path:
    p = tmp_path / name
    p.write_text(text)
    return p


class TestParseRegistry:
    """Tests for parse_registry."""

    def test_parses_records_and_skips_comments(self) -> None:
        registry = parse_registry(SAMPLE.splitlines())
        assert registry.keys() == ["desk", "nas", "htpc"]
        assert len(registry) == 3

    def test_entry_fields(self) -> None:
        registry = parse_registry(SAMPLE.splitlines())
        desk = registry.lookup("desk")
        assert desk == DeviceEntry(
            "desk", "Office Desktop", "AA:BB:CC:DD:EE:01", "192.168.1.255"
        )

    def test_broadcast_optional(self) -> None:
        registry = parse_registry(SAMPLE.splitlines())
        assert registry.lookup("nas").broadcast_address is None  # type: ignore[union-attr]

    def test_quoted_display_name_with_comma(self) -> None:
        registry = parse_registry(SAMPLE.splitlines())
        assert registry.lookup("htpc").display_name == "Living Room, HTPC"  # type: ignore[union-attr]

    def test_empty_display_name_falls_back_to_key(self) -> None:
        registry = parse_registry(["pc1,,AA:BB:CC:DD:EE:01"])
        assert registry.lookup("pc1").display_name == "pc1"  # type: ignore[union-attr]

    def test_empty_trailing_broadcast_is_none(self) -> None:
        registry = parse_registry(["pc1,PC,AA:BB:CC:DD:EE:01,"])
        assert registry.lookup("pc1").broadcast_address is None  # type: ignore[union-attr]

    def test_fields_are_stripped(self) -> None:
        registry = parse_registry(["  pc1 , PC One ,  AA:BB:CC:DD:EE:01 , 10.0.0.255 "])
        entry = registry.lookup("pc1")
        assert entry == DeviceEntry("pc1", "PC One", "AA:BB:CC:DD:EE:01", "10.0.0.255")

    def test_address_not_validated_at_load(self) -> None:
        registry = parse_registry(["bad,Bad,ZZ:ZZ:ZZ:ZZ:ZZ:ZZ"])
        assert registry.lookup("bad").hardware_address == "ZZ:ZZ:ZZ:ZZ:ZZ:ZZ"  # type: ignore[union-attr]

    def test_too_few_fields_fails_whole_load(self) -> None:
        lines = ["desk,Office,AA:BB:CC:DD:EE:01", "bad_line_without_enough_fields"]
        with pytest.raises(ConfigLoadError, match=":2:"):
            parse_registry(lines)

    def test_too_many_fields_fails(self) -> None:
        with pytest.raises(ConfigLoadError):
            parse_registry(["a,A,AA:BB:CC:DD:EE:01,10.0.0.255,extra"])

    def test_missing_key_fails(self) -> None:
        with pytest.raises(ConfigLoadError, match="missing device key"):
            parse_registry([",Name,AA:BB:CC:DD:EE:01"])

    def test_missing_mac_fails(self) -> None:
        with pytest.raises(ConfigLoadError, match="missing hardware address"):
            parse_registry(["pc1,Name,"])

    def test_duplicate_key_fails(self) -> None:
        with pytest.raises(ConfigLoadError, match="duplicate"):
            parse_registry(["pc1,A,AA:BB:CC:DD:EE:01", "pc1,B,AA:BB:CC:DD:EE:02"])

    @pytest.mark.parametrize("broadcast", ["not-an-ip", "192.168.1.256", "192.168.1.255\x00"])
    def test_invalid_broadcast_fails(self, broadcast: str) -> None:
        with pytest.raises(ConfigLoadError, match=":1: "):
            parse_registry([f"pc1,Name,AA:BB:CC:DD:EE:01,{broadcast}"])

    def test_valid_broadcast_kept(self) -> None:
        registry = parse_registry(["pc1,Name,AA:BB:CC:DD:EE:01,10.1.2.255"])
        assert registry.lookup("pc1").broadcast_address == "10.1.2.255"


class TestLookup:
    def _registry(self) -> DeviceRegistry:
        return parse_registry(
            ["A,Alpha,AA:BB:CC:DD:EE:01", "B,Bravo,AA:BB:CC:DD:EE:02", "C,Charlie,AA:BB:CC:DD:EE:03"]
        )

    def test_unknown_key_returns_none(self) -> None:
        assert self._registry().lookup("D") is None

    def test_no_prefix_or_case_matching(self) -> None:
        registry = self._registry()
        assert registry.lookup("a") is None
        assert registry.lookup("") is None
        assert registry.lookup("Alpha") is None

    def test_contains(self) -> None:
        registry = self._registry()
        assert "B" in registry
        assert "Z" not in registry

    def test_registry_mapping_is_read_only(self) -> None:
        registry = self._registry()
        with pytest.raises(TypeError):
            registry._devices["Z"] = DeviceEntry("Z", "Z", "AA:BB:CC:DD:EE:09")  # type: ignore[index]


class TestLoadRegistry:
    def test_loads_file(self, tmp_path: Path) -> None:
        registry = load_registry(_write(tmp_path, SAMPLE))
        assert len(registry) == 3
        assert registry.source.endswith("devices.csv")

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError, match="cannot read"):
            load_registry(tmp_path / "nope.csv")

    def test_empty_file_gives_empty_registry(self, tmp_path: Path) -> None:
        registry = load_registry(_write(tmp_path, "# nothing here\n\n"))
        assert len(registry) == 0

    def test_malformed_line_reports_path(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "bad_line_without_enough_fields\n")
        with pytest.raises(ConfigLoadError, match="devices.csv:1"):
            load_registry(path)

    def test_oversized_field_raises_config_error(self, tmp_path: Path) -> None:
        huge = "x" * 200_000
        path = _write(tmp_path, f'pc1,"{huge}",AA:BB:CC:DD:EE:01\n')
        with pytest.raises(ConfigLoadError, match="devices.csv:1"):
            load_registry(path)

    def test_oversized_field_on_reload_keeps_previous(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "pc1,PC,AA:BB:CC:DD:EE:01\n")
        handle = RegistryHandle(path)
        path.write_text(f'pc2,"{"y" * 200_000}",AA:BB:CC:DD:EE:02\n')
        with pytest.raises(ConfigLoadError):
            handle.reload()
        assert handle.current.keys() == ["pc1"]


class TestRegistryHandle:
    def test_current_loaded_at_init(self, tmp_path: Path) -> None:
        handle = RegistryHandle(_write(tmp_path, SAMPLE))
        assert len(handle.current) == 3

    def test_reload_swaps_registry(self, tmp_path: Path) -> None:
        path = _write(tmp_path, SAMPLE)
        handle = RegistryHandle(path)
        before = handle.current
        path.write_text("solo,Solo,AA:BB:CC:DD:EE:07\n")

        after = handle.reload()

        assert handle.current is after
        assert after.keys() == ["solo"]
        assert before.keys() == ["desk", "nas", "htpc"]

    def test_failed_reload_keeps_previous(self, tmp_path: Path) -> None:
        path = _write(tmp_path, SAMPLE)
        handle = RegistryHandle(path)
        before = handle.current
        path.write_text("bad_line_without_enough_fields\n")

        with pytest.raises(ConfigLoadError):
            handle.reload()

        assert handle.current is before

    def test_init_with_bad_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError):
            RegistryHandle(_write(tmp_path, "only,two\n"))
