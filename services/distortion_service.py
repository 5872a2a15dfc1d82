"""
Plate distortion calculator.

Flexo plates stretch around the cylinder when mounted, so artwork is
shortened by a thickness-dependent coefficient. Each plate thickness maps to a
constant K; for a given print length:

    z = K * 100 / print_length
    coefficient = 100 - z
    plate_length = print_length * coefficient / 100
"""
import logging
import math
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Union

logger = logging.getLogger(__name__)

# Thickness values are table keys, compared with this tolerance
THICKNESS_TOLERANCE = 1e-6

EDITABLE_FIELDS = ("thickness", "k", "difference")

Number = Union[int, float, str]


@dataclass(frozen=True)
class DistortionEntry:
    thickness: float
    k: float
    difference: float


@dataclass(frozen=True)
class DistortionResult:
    coefficient: float = 0.0
    plate_length: float = 0.0
    difference: float = 0.0
    matched: bool = False

    def as_dict(self) -> dict:
        return {
            "coefficient": self.coefficient,
            "plateLength": self.plate_length,
            "difference": self.difference,
            "matched": self.matched,
        }


DEFAULT_TABLE = (
    DistortionEntry(0.76, 3.67, 0.6554),
    DistortionEntry(1.14, 6.06, 1.0821),
    DistortionEntry(1.70, 9.90, 1.7679),
    DistortionEntry(2.29, 13.57, 2.4232),
    DistortionEntry(2.54, 15.16, 2.7071),
    DistortionEntry(2.72, 16.28, 2.9071),
    DistortionEntry(2.84, 17.08, 3.0500),
    DistortionEntry(3.18, 19.15, 3.4196),
    DistortionEntry(3.94, 23.94, 4.2750),
    DistortionEntry(4.32, 26.34, 4.7036),
    DistortionEntry(4.70, 28.73, 5.1304),
    DistortionEntry(5.00, 30.64, 5.4714),
    DistortionEntry(5.51, 33.84, 6.0429),
    DistortionEntry(6.02, 37.00, 6.6071),
    DistortionEntry(6.35, 39.10, 6.9821),
    DistortionEntry(6.50, 40.04, 7.1500),
)


def _to_float(value: Number) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class DistortionTable:
    """
    In-memory, user-editable distortion table.
    Rows are not checked for unique or ordered thickness values.
    """

    def __init__(self, entries: Optional[Iterable[DistortionEntry]] = None):
        self._entries: List[DistortionEntry] = list(DEFAULT_TABLE if entries is None else entries)

    @property
    def entries(self) -> List[DistortionEntry]:
        return list(self._entries)

    def __len__(self):
        return len(self._entries)

    def find(self, thickness: float) -> Optional[DistortionEntry]:
        for entry in self._entries:
            if math.isclose(entry.thickness, thickness, rel_tol=0.0, abs_tol=THICKNESS_TOLERANCE):
                return entry
        return None

    def add_entry(self) -> DistortionEntry:
        entry = DistortionEntry(0.0, 0.0, 0.0)
        self._entries.append(entry)
        return entry

    def update_entry(self, index: int, field: str, value: float) -> DistortionEntry:
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown distortion table field: {field}")
        entry = replace(self._entries[index], **{field: float(value)})
        self._entries[index] = entry
        return entry

    def remove_entry(self, index: int) -> bool:
        """Remove a row; the last remaining row is kept."""
        if len(self._entries) <= 1:
            return False
        del self._entries[index]
        return True

    def reset(self):
        self._entries = list(DEFAULT_TABLE)


def calculate_distortion(
    print_length: Number,
    plate_thickness: Number,
    table: Optional[DistortionTable] = None,
) -> DistortionResult:
    """
    Compute the distortion coefficient for a print length and plate thickness.

    Returns a zero result (matched=False) when either input is not a number,
    the print length is not positive, or the thickness is not in the table.
    """
    length = _to_float(print_length)
    thickness = _to_float(plate_thickness)
    if length is None or thickness is None or length <= 0:
        return DistortionResult()

    entry = (table or DistortionTable()).find(thickness)
    if entry is None:
        logger.debug(f"No distortion table entry for thickness {thickness}")
        return DistortionResult()

    z = (entry.k * 100) / length
    coefficient = 100 - z
    plate_length = length * coefficient / 100
    if not math.isfinite(plate_length):
        return DistortionResult()
    return DistortionResult(coefficient, plate_length, z, True)
