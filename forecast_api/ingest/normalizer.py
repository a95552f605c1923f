"""Normalizer: picks one township out of the CWA document and flattens it.

The Wx element defines the time axis. Every other element is read at the
same index, so a township whose elements disagree on axis length yields
periods with blank fields rather than an error; misaligned elements are
logged.
"""

import logging
from collections.abc import Callable, Sequence
from enum import StrEnum
from typing import Any

from forecast_api.ingest.errors import DataNotFoundError, StructuralDataError
from forecast_api.models.forecast import ForecastPeriod, NormalizedWeatherResponse

logger = logging.getLogger(__name__)

UNKNOWN_ISSUE_TIME = "未知發布時間"
CELSIUS = "°C"
PERCENT = "%"


class ElementKind(StrEnum):
    WEATHER = "Wx"
    POP_6H = "PoP6h"
    POP_12H = "PoP12h"
    TEMPERATURE = "T"
    COMFORT = "CI"
    WIND_SPEED = "Ws"


TimeSeries = list[dict[str, Any]]
ElementSeries = dict[ElementKind, TimeSeries]
FieldSetter = Callable[[dict[str, str], str], None]
RainResolver = Callable[[ElementSeries, int], str | None]


def _set_weather(fields: dict[str, str], value: str) -> None:
    fields["weather"] = value


def _set_temperature(fields: dict[str, str], value: str) -> None:
    # Dataset only provides a point temperature
    fields["min_temp"] = value + CELSIUS
    fields["max_temp"] = value + CELSIUS


def _set_comfort(fields: dict[str, str], value: str) -> None:
    fields["comfort"] = value


def _set_wind_speed(fields: dict[str, str], value: str) -> None:
    fields["wind_speed"] = value


FIELD_SETTERS: dict[ElementKind, FieldSetter] = {
    ElementKind.WEATHER: _set_weather,
    ElementKind.TEMPERATURE: _set_temperature,
    ElementKind.COMFORT: _set_comfort,
    ElementKind.WIND_SPEED: _set_wind_speed,
}


def element_resolver(kind: ElementKind) -> RainResolver:
    """Resolver reading an element's value at the period index."""

    def resolve(series: ElementSeries, index: int) -> str | None:
        return value_at(series.get(kind), index)

    return resolve


def constant_resolver(value: str) -> RainResolver:
    def resolve(series: ElementSeries, index: int) -> str | None:
        return value

    return resolve


# Evaluated in order; the first non-None value wins.
RAIN_RESOLVERS: tuple[RainResolver, ...] = (
    element_resolver(ElementKind.POP_6H),
    element_resolver(ElementKind.POP_12H),
    constant_resolver("0"),
)


def resolve_rain(
    series: ElementSeries,
    index: int,
    resolvers: Sequence[RainResolver] = RAIN_RESOLVERS,
) -> str:
    for resolver in resolvers:
        value = resolver(series, index)
        if value is not None:
            return value + PERCENT
    return ""


def value_at(times: TimeSeries | None, index: int) -> str | None:
    """parameterName of the index-th time entry, or None if absent/empty."""
    if not times or index >= len(times):
        return None
    entry = times[index]
    if not isinstance(entry, dict):
        return None
    parameter = entry.get("parameter")
    if not isinstance(parameter, dict):
        return None
    value = parameter.get("parameterName")
    if value is None or value == "":
        return None
    return str(value)


def select_township(locations: list[dict[str, Any]], target_city: str) -> dict[str, Any]:
    """Exact name match, else the first township listed."""
    for loc in locations:
        if loc.get("locationName") == target_city:
            return loc
    logger.warning(
        "No township named %s; falling back to %s",
        target_city, locations[0].get("locationName"),
    )
    return locations[0]


def index_elements(elements: list[dict[str, Any]]) -> ElementSeries:
    """Map known element kinds to their time series.

    Unknown names are skipped; for a repeated name the first element wins.
    """
    series: ElementSeries = {}
    for element in elements:
        name = element.get("elementName")
        try:
            kind = ElementKind(name)
        except ValueError:
            logger.debug("Ignoring weather element %s", name)
            continue
        series.setdefault(kind, element.get("time") or [])
    return series


def misaligned_elements(series: ElementSeries, axis_length: int) -> list[str]:
    return [
        str(kind) for kind, times in series.items() if len(times) != axis_length
    ]


def normalize(doc: dict[str, Any], target_city: str) -> NormalizedWeatherResponse:
    records = doc.get("records")
    if not isinstance(records, dict):
        raise DataNotFoundError("Response has no records")

    groups = records.get("locations") or []
    group = groups[0] if groups else None
    if not group or not group.get("location"):
        raise DataNotFoundError("No township data for the county")

    township = select_township(group["location"], target_city)
    if not township:
        raise DataNotFoundError(f"No township data for {target_city}")

    series = index_elements(township.get("weatherElement") or [])
    if ElementKind.WEATHER not in series:
        raise StructuralDataError(
            f"Township {township.get('locationName')} has no Wx element"
        )

    axis = series[ElementKind.WEATHER]
    misaligned = misaligned_elements(series, len(axis))
    if misaligned:
        logger.warning(
            "Elements %s do not match the Wx time axis (%d entries)",
            ", ".join(misaligned), len(axis),
        )

    forecasts = tuple(_build_period(series, axis[i], i) for i in range(len(axis)))

    return NormalizedWeatherResponse(
        city=township.get("locationName", target_city),
        update_time=records.get("issueTime") or UNKNOWN_ISSUE_TIME,
        forecasts=forecasts,
    )


def _build_period(series: ElementSeries, slot: dict[str, Any], index: int) -> ForecastPeriod:
    fields: dict[str, str] = {}
    for kind, setter in FIELD_SETTERS.items():
        value = value_at(series.get(kind), index)
        if value is not None:
            setter(fields, value)
    fields["rain"] = resolve_rain(series, index)

    return ForecastPeriod(
        start_time=slot.get("startTime", ""),
        end_time=slot.get("endTime", ""),
        **fields,
    )
