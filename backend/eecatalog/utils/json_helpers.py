"""Lenient JSON decoding for upstream catalog feeds.

Some catalog feeds are serialized by tools that emit the bare token ``NaN``
for missing numbers, which is not valid JSON. ``lenient_loads`` first decodes
the text as strict JSON; only if that fails does it decode a second time
with exactly one relaxation: a bare ``NaN`` literal becomes ``None``.
``Infinity``, ``-Infinity`` and every other syntax error still fail, and a
``NaN`` inside a string value is never touched.

Example:
    Decode a feed containing a bare NaN:
        >>> from eecatalog.utils.json_helpers import lenient_loads
        >>> lenient_loads('[{"id": "A/B", "gsd": NaN}]')
        [{'id': 'A/B', 'gsd': None}]

    Malformed input still raises:
        >>> lenient_loads('[{"id": ')
        Traceback (most recent call last):
        json.decoder.JSONDecodeError: ...
"""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


class NonStandardConstantError(ValueError):
    """Raised by the strict pass when a NaN/Infinity literal is found."""


def _reject_constant(name: str) -> Any:
    raise NonStandardConstantError(f"Non-standard JSON constant: {name}")


def _nan_as_null(name: str) -> Any:
    if name == "NaN":
        return None
    raise NonStandardConstantError(f"Non-standard JSON constant: {name}")


def strict_loads(text: str) -> Any:
    """Decode standard JSON, rejecting NaN and Infinity literals.

    Args:
        text: JSON document text.

    Returns:
        The decoded document.

    Raises:
        json.JSONDecodeError: If the text is not valid JSON.
        NonStandardConstantError: If the text contains NaN or Infinity.
    """
    return json.loads(text, parse_constant=_reject_constant)


def lenient_loads(text: str) -> Any:
    """Decode JSON, retrying once with bare ``NaN`` read as ``null``.

    Args:
        text: JSON document text.

    Returns:
        The decoded document.

    Raises:
        json.JSONDecodeError: If the text is malformed even after the retry.
        NonStandardConstantError: If the text contains Infinity or -Infinity.
    """
    try:
        return strict_loads(text)
    except (json.JSONDecodeError, NonStandardConstantError) as exc:
        logger.warning("Strict JSON decode failed (%s), retrying leniently", exc)

    return json.loads(text, parse_constant=_nan_as_null)
