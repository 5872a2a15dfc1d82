"""
Area calculator: clean and bleed area per job row, in square metres from millimetres.
"""
import math
from dataclasses import dataclass, field, replace
from typing import Iterable, List

BLEED_MARGIN_MM = 12
MM2_PER_M2 = 1_000_000
MAX_ROWS = 10

ROW_FIELDS = ("width", "height", "quantity")


def _finite_sum(values: Iterable[float]) -> float:
    total = sum(values)
    return total if math.isfinite(total) else 0.0


@dataclass(frozen=True)
class AreaRow:
    id: int
    width: str = ""
    height: str = ""
    quantity: str = "1"


@dataclass(frozen=True)
class AreaRowResult:
    id: int
    clean_area: float
    bleed_area: float


@dataclass
class AreaSummary:
    rows: List[AreaRowResult] = field(default_factory=list)

    @property
    def total_clean(self) -> float:
        return _finite_sum(row.clean_area for row in self.rows)

    @property
    def total_bleed(self) -> float:
        return _finite_sum(row.bleed_area for row in self.rows)

    def as_dict(self) -> dict:
        return {
            "rows": [
                {"id": row.id, "cleanArea": row.clean_area, "bleedArea": row.bleed_area}
                for row in self.rows
            ],
            "totalClean": self.total_clean,
            "totalBleed": self.total_bleed,
        }


def _number(value) -> float:
    # blank, garbage or non-finite cells count as zero
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def calculate_row(row: AreaRow) -> AreaRowResult:
    width = _number(row.width)
    height = _number(row.height)
    quantity = _number(row.quantity)

    clean = (width * height / MM2_PER_M2) * quantity
    bleed = ((width + BLEED_MARGIN_MM) * (height + BLEED_MARGIN_MM) / MM2_PER_M2) * quantity
    if not (math.isfinite(clean) and math.isfinite(bleed)):
        return AreaRowResult(row.id, 0.0, 0.0)
    return AreaRowResult(row.id, clean, bleed)


def calculate_areas(rows: Iterable[AreaRow]) -> AreaSummary:
    return AreaSummary([calculate_row(row) for row in rows])


class AreaSheet:
    """Editable set of area rows; between 1 and MAX_ROWS rows at all times."""

    def __init__(self):
        self.rows: List[AreaRow] = [AreaRow(1)]

    def add_row(self) -> bool:
        if len(self.rows) >= MAX_ROWS:
            return False
        new_id = max(row.id for row in self.rows) + 1
        self.rows.append(AreaRow(new_id))
        return True

    def remove_row(self, row_id: int) -> bool:
        if len(self.rows) <= 1:
            return False
        remaining = [row for row in self.rows if row.id != row_id]
        if len(remaining) == len(self.rows):
            return False
        self.rows = remaining
        return True

    def update_row(self, row_id: int, field_name: str, value: str):
        if field_name not in ROW_FIELDS:
            raise ValueError(f"Unknown area row field: {field_name}")
        self.rows = [
            replace(row, **{field_name: value}) if row.id == row_id else row
            for row in self.rows
        ]

    def clear(self):
        self.rows = [AreaRow(1)]

    def calculate(self) -> AreaSummary:
        return calculate_areas(self.rows)
