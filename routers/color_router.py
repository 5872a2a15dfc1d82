import logging
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from backend.utils.responses import error_response
from services.color_service import InvalidColorFormat, convert_color

logger = logging.getLogger(__name__)

color_router = APIRouter(prefix="/api/color", tags=["color"])


class ColorConvertRequest(BaseModel):
    # any JSON type; convert_color rejects non-strings
    type: Any = None
    value: Any = None


@color_router.post("/convert")
async def convert(request: ColorConvertRequest):
    """Convert a hex, rgb or cmyk color into all representations."""
    try:
        return convert_color(request.type, request.value)
    except InvalidColorFormat as e:
        logger.info(f"Rejected color conversion {request.type}={request.value!r}: {e}")
        return error_response("Invalid color format", status=400, detail=str(e))
