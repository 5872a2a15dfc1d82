"""
Barcode Router - single code rendering and bulk ZIP export
"""

import logging
import time
from typing import Literal

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from pydantic import BaseModel

from auth import require_subscription_access
from backend.utils.responses import error_response
from services.barcode_service import MEDIA_TYPES, InvalidBarcodeData, render_bulk_zip, render_code

logger = logging.getLogger(__name__)

barcode_router = APIRouter(prefix="/api/barcode", tags=["barcode"])

CodeType = Literal["qr", "code128", "ean13"]


class BarcodeRequest(BaseModel):
    type: CodeType = "qr"
    data: str
    format: Literal["png", "svg"] = "png"


class BulkBarcodeRequest(BaseModel):
    type: CodeType = "qr"
    lines: str


def _attachment(filename: str) -> dict:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


@barcode_router.post("/generate")
async def generate(
    request: BarcodeRequest,
    user: dict = Depends(require_subscription_access),
):
    try:
        content = render_code(request.type, request.data, request.format)
    except InvalidBarcodeData as e:
        return error_response("Invalid data for barcode type", status=400, detail=str(e))

    filename = f"{request.type}_{int(time.time() * 1000)}.{request.format}"
    return Response(content=content, media_type=MEDIA_TYPES[request.format], headers=_attachment(filename))


@barcode_router.post("/bulk")
async def generate_bulk(
    request: BulkBarcodeRequest,
    user: dict = Depends(require_subscription_access),
):
    if not request.lines.strip():
        return error_response("No data lines provided", status=400)

    content = render_bulk_zip(request.type, request.lines)
    filename = f"bulk_{request.type}_{int(time.time() * 1000)}.zip"
    logger.info(f"Generated bulk {request.type} archive for user {user.get('id')}")
    return Response(content=content, media_type="application/zip", headers=_attachment(filename))
