"""Rate payload shapes.

Upstream sources disagree on where the rate map lives. Each shape is a
(detector, extractor) pair; `normalize_payload` tries them in order and the
first detector that matches decides the extraction. Supporting a new source
format means appending a RateShape, nothing else.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

RateMap = Dict[str, Any]


@dataclass(frozen=True)
class RateShape:
    name: str
    detect: Callable[[Mapping[str, Any]], bool]
    extract: Callable[[Mapping[str, Any]], RateMap]


def _has_map(key: str) -> Callable[[Mapping[str, Any]], bool]:
    def detect(payload: Mapping[str, Any]) -> bool:
        # an empty map still counts; every code then takes its default
        return isinstance(payload.get(key), Mapping)

    return detect


def _take_map(key: str) -> Callable[[Mapping[str, Any]], RateMap]:
    def extract(payload: Mapping[str, Any]) -> RateMap:
        return dict(payload[key])

    return extract


def default_shapes(base_currency: str) -> Sequence[RateShape]:
    """Known shapes in priority order for the given base currency."""
    nested = base_currency.lower()
    return (
        RateShape("rates", _has_map("rates"), _take_map("rates")),
        RateShape(
            "conversion_rates",
            _has_map("conversion_rates"),
            _take_map("conversion_rates"),
        ),
        RateShape(f"nested:{nested}", _has_map(nested), _take_map(nested)),
    )


def normalize_payload(
    payload: Any, shapes: Sequence[RateShape]
) -> Optional[RateMap]:
    """Return the flat code -> rate map, or None when no shape matches."""
    if not isinstance(payload, Mapping):
        return None
    for shape in shapes:
        if shape.detect(payload):
            return shape.extract(payload)
    return None
