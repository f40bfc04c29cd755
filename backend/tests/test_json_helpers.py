"""Unit tests for utilities in backend.eecatalog.utils.json_helpers.

This module tests the lenient JSON decoder used for catalog feeds:
    - Standard JSON decodes unchanged on the first pass,
    - Bare NaN literals decode as None on the retry,
    - Infinity literals and syntax errors still fail.

See Also:
    - backend/eecatalog/utils/json_helpers.py for implementation details.
"""

import json
import math

import pytest

from eecatalog.utils import json_helpers


def test_lenient_loads_standard_json() -> None:
    assert json_helpers.lenient_loads('[{"id": "A/B", "n": 1.5}]') == [
        {"id": "A/B", "n": 1.5}
    ]


def test_lenient_loads_replaces_bare_nan() -> None:
    result = json_helpers.lenient_loads('{"a": NaN, "b": [NaN, 2], "c": "NaN"}')
    assert result == {"a": None, "b": [None, 2], "c": "NaN"}


def test_lenient_loads_logs_fallback(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("WARNING", logger="eecatalog.utils.json_helpers"):
        json_helpers.lenient_loads("[NaN]")
    assert "retrying leniently" in caplog.text


def test_lenient_loads_rejects_infinity() -> None:
    with pytest.raises(json_helpers.NonStandardConstantError):
        json_helpers.lenient_loads('{"a": Infinity}')


def test_lenient_loads_malformed_raises() -> None:
    with pytest.raises(json.JSONDecodeError):
        json_helpers.lenient_loads('{"a": NaN,')


def test_strict_loads_rejects_nan() -> None:
    """The strict pass never yields float NaN values."""
    with pytest.raises(json_helpers.NonStandardConstantError):
        json_helpers.strict_loads("[NaN]")
    assert not any(
        isinstance(v, float) and math.isnan(v)
        for v in json_helpers.lenient_loads("[NaN, 1]")
    )
