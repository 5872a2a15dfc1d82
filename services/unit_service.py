"""
Quick conversion tools: length (mm <-> inch) and screen ruling (LPI <-> DPI).
Unparsable input yields None so the paired field can be cleared.
"""
import math
from typing import Optional

MM_PER_INCH = 25.4
# Rule-of-thumb 16 grey levels per halftone cell side
DPI_PER_LPI = 16


def _parse(value) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _finite(result: Optional[float]) -> Optional[float]:
    # huge inputs can overflow to inf
    return result if result is not None and math.isfinite(result) else None


def mm_to_inch(value) -> Optional[float]:
    mm = _parse(value)
    return None if mm is None else round(mm / MM_PER_INCH, 6)


def inch_to_mm(value) -> Optional[float]:
    inches = _parse(value)
    return None if inches is None else _finite(round(inches * MM_PER_INCH, 6))


def lpi_to_dpi(value) -> Optional[int]:
    lpi = _parse(value)
    dpi = None if lpi is None else _finite(lpi * DPI_PER_LPI)
    return None if dpi is None else int(round(dpi))


def dpi_to_lpi(value) -> Optional[float]:
    dpi = _parse(value)
    return None if dpi is None else round(dpi / DPI_PER_LPI, 1)
