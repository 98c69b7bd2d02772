"""Tests for host capability resolution."""

import pytest

from dynblk.domain.capabilities import (
    ZERO_ROW_FIX_VERSION,
    Capabilities,
    parse_version,
    resolve_capabilities,
    version_less_than,
)


class TestVersions:
    def test_parse(self) -> None:
        assert parse_version("7.11.0.584") == (7, 11, 0, 584)

    def test_parse_invalid(self) -> None:
        with pytest.raises(ValueError, match="Invalid host version"):
            parse_version("R2010a")

    @pytest.mark.parametrize(
        ("version", "expected"),
        [
            ("7.10.0.499", True),
            ("7.11", True),
            ("7.11.0.584", False),
            ("7.11.1", False),
            ("8", False),
        ],
    )
    def test_less_than_fix(self, version: str, expected: bool) -> None:
        assert version_less_than(version, ZERO_ROW_FIX_VERSION) is expected


class TestResolveCapabilities:
    def test_default_has_no_quirk(self) -> None:
        assert resolve_capabilities() == Capabilities(collapses_zero_rows=False)

    def test_old_host(self) -> None:
        assert resolve_capabilities(host_version="7.10.0.499").collapses_zero_rows

    def test_new_host(self) -> None:
        assert not resolve_capabilities(host_version="9.1").collapses_zero_rows

    def test_explicit_override_wins(self) -> None:
        caps = resolve_capabilities(host_version="9.1", zero_row_quirk=True)
        assert caps.collapses_zero_rows

    def test_custom_fix_version(self) -> None:
        caps = resolve_capabilities(host_version="9.1", quirk_fixed_in="10.0")
        assert caps.collapses_zero_rows

    def test_frozen(self) -> None:
        caps = Capabilities()
        with pytest.raises(Exception):
            caps.collapses_zero_rows = True  # type: ignore[misc]
