from __future__ import annotations

import base64
import logging
import os
from typing import Optional

from reviewcircle.core.config import config

logger = logging.getLogger(__name__)

LOGO_CANDIDATES = (
    os.path.join("report_template", "deeplogo.png"),
    os.path.join("report_template", "deep-logo.png"),
    os.path.join("public", "deep-logo.png"),
)

FALLBACK_LOGO_SVG = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<svg xmlns="http://www.w3.org/2000/svg" width="140" height="140" viewBox="0 0 140 140">'
    "<defs>"
    '<linearGradient id="g" x1="0%" y1="0%" x2="100%" y2="100%">'
    '<stop offset="0%" stop-color="#F59E0B"/>'
    '<stop offset="50%" stop-color="#A96AFF"/>'
    '<stop offset="100%" stop-color="#60A5FA"/>'
    "</linearGradient>"
    "</defs>"
    '<rect rx="24" ry="24" width="140" height="140" fill="url(#g)"/>'
    '<text x="50%" y="54%" text-anchor="middle" font-size="56" '
    'font-family="Montserrat, Arial, sans-serif" fill="#0C021E" font-weight="700">DEP</text>'
    "</svg>"
)


def _data_url(mime_type: str, content: bytes) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(content).decode('ascii')}"


def fallback_logo_data_url() -> str:
    return _data_url("image/svg+xml", FALLBACK_LOGO_SVG.encode("utf-8"))


def get_logo_data_url(base_dir: Optional[str] = None) -> str:
    """Return the report logo as a data URI.

    The first candidate file found under ``base_dir`` is embedded as PNG. When
    none can be read, a generated SVG mark is returned instead so a missing
    asset never fails a render.
    """
    root = base_dir if base_dir is not None else config.report.base_dir
    for candidate in LOGO_CANDIDATES:
        path = os.path.join(root, candidate)
        if not os.path.isfile(path):
            continue
        try:
            with open(path, "rb") as fh:
                content = fh.read()
        except OSError as exc:
            logger.warning("Could not read report logo %s: %s; using generated logo", path, exc)
            break
        return _data_url("image/png", content)

    logger.debug("No report logo found under %s; using generated logo", root)
    return fallback_logo_data_url()
