"""
Barcode Service - QR, Code128 and EAN-13 rendering, presets and bulk ZIP export
"""

import io
import logging
import re
import zipfile
from dataclasses import dataclass
from typing import List, Optional

import barcode
import qrcode
import qrcode.image.svg
from barcode.errors import BarcodeError
from barcode.writer import ImageWriter, SVGWriter

logger = logging.getLogger(__name__)

CODE_TYPES = ("qr", "code128", "ean13")
FORMATS = ("png", "svg")

MEDIA_TYPES = {
    "png": "image/png",
    "svg": "image/svg+xml",
}

# QR: 10 px per module, 2-module quiet zone
QR_BOX_SIZE = 10
QR_BORDER = 2

# Linear codes: at 254 dpi one millimetre is 10 px, so bars are 2 px wide and 80 px tall
LINEAR_WRITER_OPTIONS = {
    "module_width": 0.2,
    "module_height": 8.0,
    "font_size": 12,
    "write_text": True,
}
LINEAR_IMAGE_DPI = 254


class InvalidBarcodeData(ValueError):
    """Raised when data cannot be encoded with the requested symbology."""


@dataclass(frozen=True)
class Preset:
    name: str
    code_type: str
    data: str


class PresetStore:
    """
    Named barcode presets kept in memory for the current session only.
    """

    def __init__(self):
        self._presets: List[Preset] = []

    def save(self, name: str, code_type: str, data: str) -> Optional[Preset]:
        if not name or not data:
            return None
        if code_type not in CODE_TYPES:
            raise InvalidBarcodeData(f"Unsupported code type: {code_type}")
        preset = Preset(name, code_type, data)
        self._presets.append(preset)
        return preset

    def remove(self, index: int):
        self._presets = [p for i, p in enumerate(self._presets) if i != index]

    def all(self) -> List[Preset]:
        return list(self._presets)


def _render_qr(data: str, fmt: str) -> bytes:
    qr = qrcode.QRCode(box_size=QR_BOX_SIZE, border=QR_BORDER)
    qr.add_data(data)
    qr.make(fit=True)

    if fmt == "svg":
        image = qr.make_image(image_factory=qrcode.image.svg.SvgPathImage)
    else:
        image = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    image.save(buffer)
    return buffer.getvalue()


def _render_linear(code_type: str, data: str, fmt: str) -> bytes:
    options = dict(LINEAR_WRITER_OPTIONS)
    if fmt == "svg":
        writer = SVGWriter()
    else:
        writer = ImageWriter()
        options["dpi"] = LINEAR_IMAGE_DPI

    try:
        code = barcode.get_barcode_class(code_type)(data, writer=writer)
        buffer = io.BytesIO()
        code.write(buffer, options=options)
    except (BarcodeError, ValueError, KeyError) as e:
        raise InvalidBarcodeData(f"Invalid data for barcode type {code_type}: {e}")
    return buffer.getvalue()


def render_code(code_type: str, data: str, fmt: str = "png") -> bytes:
    """
    Render a single code.

    Args:
        code_type: "qr", "code128" or "ean13"
        data: Payload to encode
        fmt: "png" or "svg"

    Returns:
        Encoded image bytes

    Raises:
        InvalidBarcodeData: If the type/format is unknown or the data cannot be encoded
    """
    if code_type not in CODE_TYPES:
        raise InvalidBarcodeData(f"Unsupported code type: {code_type}")
    if fmt not in FORMATS:
        raise InvalidBarcodeData(f"Unsupported format: {fmt}")
    if not data:
        raise InvalidBarcodeData("No data to encode")

    if code_type == "qr":
        return _render_qr(data, fmt)
    return _render_linear(code_type, data, fmt)


def bulk_entry_name(code_type: str, index: int, data: str) -> str:
    safe = re.sub(r"[^a-zA-Z0-9]", "_", data)
    return f"{code_type}_{index}_{safe}.png"


def render_bulk_zip(code_type: str, text: str) -> bytes:
    """
    Render one PNG per non-blank line of text and pack them into a ZIP archive.
    Lines that cannot be encoded are logged and skipped.
    """
    if code_type not in CODE_TYPES:
        raise InvalidBarcodeData(f"Unsupported code type: {code_type}")

    lines = [line.strip() for line in text.splitlines() if line.strip()]

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for index, data in enumerate(lines, start=1):
            try:
                image = render_code(code_type, data, "png")
            except InvalidBarcodeData as e:
                logger.error(f"Error generating code for {data}: {e}")
                continue
            archive.writestr(bulk_entry_name(code_type, index, data), image)

    return buffer.getvalue()
