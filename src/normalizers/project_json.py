"""project.json reader.

Produces a typed key/value mapping: nested objects become dicts, arrays
become lists, and scalar strings that are ISO-8601 timestamps or GUIDs are
converted to ``datetime`` and ``uuid.UUID``. Turning the mapping into a
``PackageSpec`` is the job of ``projectmodel.read_project_json_spec``.
"""

from __future__ import annotations

import json
import logging
import os
import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from common.errors import MalformedDescriptorError

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(
    r"^(?P<y>\d{4})-(?P<mo>\d{2})-(?P<d>\d{2})T(?P<h>\d{2}):(?P<mi>\d{2})"
    r"(?::(?P<s>\d{2})(?:\.(?P<frac>\d+))?)?"
    r"(?P<tz>Z|[+-]\d{2}:\d{2})?$"
)
_GUID_RE = re.compile(
    r"^\{?[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}\}?$"
)


def _parse_date(text: str) -> Optional[datetime]:
    m = _DATE_RE.match(text)
    if not m:
        return None
    tzinfo = None
    tz = m.group("tz")
    if tz == "Z":
        tzinfo = timezone.utc
    elif tz:
        sign = -1 if tz[0] == "-" else 1
        hours, minutes = int(tz[1:3]), int(tz[4:6])
        tzinfo = timezone(sign * timedelta(hours=hours, minutes=minutes))
    frac = (m.group("frac") or "0")[:6].ljust(6, "0")
    try:
        return datetime(
            int(m.group("y")), int(m.group("mo")), int(m.group("d")),
            int(m.group("h")), int(m.group("mi")), int(m.group("s") or 0),
            int(frac), tzinfo=tzinfo,
        )
    except ValueError:
        return None


def unbox(value: Any) -> Any:
    """Convert a decoded JSON value to its narrowest semantic type."""
    if isinstance(value, dict):
        return {key: unbox(item) for key, item in value.items()}
    if isinstance(value, list):
        return [unbox(item) for item in value]
    if isinstance(value, str):
        parsed = _parse_date(value)
        if parsed is not None:
            return parsed
        if _GUID_RE.match(value):
            return uuid.UUID(value.strip("{}"))
    # bool, int, float, str and None are already typed by the decoder
    return value


def read_project_json(path: str) -> Optional[Dict[str, Any]]:
    """Read a project.json file into a typed mapping.

    Returns:
        The mapping, or None when the file does not exist.

    Raises:
        ValueError: If ``path`` is blank.
        MalformedDescriptorError: If the file is not valid JSON or its root is
            not an object.
    """
    if not path or not path.strip():
        raise ValueError("path must not be empty")
    if not os.path.isfile(path):
        logger.debug("No project.json at %s", path)
        return None

    with open(path, "r", encoding="utf-8-sig") as f:
        text = f.read()
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedDescriptorError(path, str(e)) from e
    if not isinstance(data, dict):
        raise MalformedDescriptorError(path, "root element must be a JSON object")
    return unbox(data)
