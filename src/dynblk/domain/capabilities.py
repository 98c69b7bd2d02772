"""Host capability flags, resolved once at the start of a run.

Older host releases generate a function block that collapses an all-zero
row vector to a scalar zero. Builders consult :class:`Capabilities`
instead of probing the host version themselves.
"""

from __future__ import annotations

from pydantic import BaseModel

# First host release whose function blocks keep the 1xN shape of a zero row.
ZERO_ROW_FIX_VERSION = "7.11.0.584"


class Capabilities(BaseModel):
    """Compatibility switches for the code generation host."""

    model_config = {"frozen": True}

    collapses_zero_rows: bool = False


def parse_version(version: str) -> tuple[int, ...]:
    """Parse a dotted numeric version (``"7.10.0.499"``) into a tuple."""
    parts = version.strip().split(".")
    try:
        return tuple(int(p) for p in parts)
    except ValueError:
        msg = f"Invalid host version '{version}'"
        raise ValueError(msg) from None


def version_less_than(version: str, reference: str) -> bool:
    """Compare dotted versions, padding the shorter one with zeros."""
    a, b = parse_version(version), parse_version(reference)
    width = max(len(a), len(b))
    return a + (0,) * (width - len(a)) < b + (0,) * (width - len(b))


def resolve_capabilities(
    *,
    host_version: str | None = None,
    quirk_fixed_in: str = ZERO_ROW_FIX_VERSION,
    zero_row_quirk: bool | None = None,
) -> Capabilities:
    """Decide the capability flags for one run.

    An explicit *zero_row_quirk* wins. Otherwise the quirk is active only
    when *host_version* is known and older than *quirk_fixed_in*.
    """
    if zero_row_quirk is not None:
        return Capabilities(collapses_zero_rows=zero_row_quirk)
    if host_version is None:
        return Capabilities()
    return Capabilities(collapses_zero_rows=version_less_than(host_version, quirk_fixed_in))
