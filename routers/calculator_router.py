"""
Calculator Router - distortion, area and unit conversion endpoints.
All routes require a trial or active subscription.
"""

from typing import List, Literal, Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from auth import require_subscription_access
from services.area_service import AreaRow, calculate_areas
from services.distortion_service import DEFAULT_TABLE, DistortionEntry, DistortionTable, calculate_distortion
from services.unit_service import dpi_to_lpi, inch_to_mm, lpi_to_dpi, mm_to_inch

calculator_router = APIRouter(prefix="/api", tags=["calculators"])

Numeric = Union[float, str, None]


class DistortionEntryModel(BaseModel):
    thickness: float
    k: float
    difference: float = 0.0


class DistortionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    print_length: Numeric = Field(default=None, alias="printLength")
    plate_thickness: Numeric = Field(default=None, alias="plateThickness")
    table: Optional[List[DistortionEntryModel]] = None


class AreaRowModel(BaseModel):
    id: int
    width: Numeric = ""
    height: Numeric = ""
    quantity: Numeric = "1"


class AreaRequest(BaseModel):
    rows: List[AreaRowModel] = Field(min_length=1)


class LengthRequest(BaseModel):
    value: Numeric = None
    unit: Literal["mm", "inch"]


class ScreenRequest(BaseModel):
    value: Numeric = None
    unit: Literal["lpi", "dpi"]


def _entries_as_dicts(entries):
    return [
        {"thickness": e.thickness, "k": e.k, "difference": e.difference}
        for e in entries
    ]


@calculator_router.get("/distortion/table")
async def distortion_table():
    """Seed distortion table; clients edit their own copy."""
    return {"entries": _entries_as_dicts(DEFAULT_TABLE)}


@calculator_router.post("/distortion/calculate")
async def distortion_calculate(
    request: DistortionRequest,
    user: dict = Depends(require_subscription_access),
):
    table = None
    if request.table:
        table = DistortionTable(
            DistortionEntry(row.thickness, row.k, row.difference) for row in request.table
        )
    result = calculate_distortion(request.print_length, request.plate_thickness, table)
    return result.as_dict()


@calculator_router.post("/area/calculate")
async def area_calculate(
    request: AreaRequest,
    user: dict = Depends(require_subscription_access),
):
    rows = [
        AreaRow(row.id, str(row.width or ""), str(row.height or ""), str(row.quantity or ""))
        for row in request.rows
    ]
    return calculate_areas(rows).as_dict()


@calculator_router.post("/units/length")
async def convert_length(
    request: LengthRequest,
    user: dict = Depends(require_subscription_access),
):
    if request.unit == "mm":
        return {"mm": request.value, "inch": mm_to_inch(request.value)}
    return {"inch": request.value, "mm": inch_to_mm(request.value)}


@calculator_router.post("/units/screen")
async def convert_screen(
    request: ScreenRequest,
    user: dict = Depends(require_subscription_access),
):
    if request.unit == "lpi":
        return {"lpi": request.value, "dpi": lpi_to_dpi(request.value)}
    return {"dpi": request.value, "lpi": dpi_to_lpi(request.value)}
