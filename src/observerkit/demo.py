"""Weather station built on a registry: one measurement source, several displays.

The station never knows which displays exist. Displays subscribe on
construction and may be closed independently.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
import logging

from .registry import PublishResult, Registry, SubscriptionHandle

LOGGER = logging.getLogger(__name__)

MEASUREMENTS_TOPIC = "weather.measurements"


@dataclass(frozen=True)
class Measurements:
    temperature: float
    humidity: float
    pressure: float


class WeatherStation:
    """Measurement source that pushes every new reading to its registry."""

    def __init__(self, registry: Registry, topic: str = MEASUREMENTS_TOPIC) -> None:
        self.registry = registry
        self.topic = topic
        self._latest: Measurements | None = None

    @property
    def latest(self) -> Measurements | None:
        return self._latest

    def set_measurements(
        self, temperature: float, humidity: float, pressure: float
    ) -> PublishResult:
        self._latest = Measurements(temperature, humidity, pressure)
        return self.registry.publish(self.topic, self._latest)


class Display(ABC):
    """Base for displays; subclasses implement ``update`` and ``render``."""

    def __init__(
        self,
        station: WeatherStation,
        output: Callable[[str], None] = print,
    ) -> None:
        self.output = output
        self._station = station
        self._handle: SubscriptionHandle | None = station.registry.subscribe(
            station.topic, self.update
        )

    @abstractmethod
    def update(self, measurements: Measurements) -> None:
        """Receive a new reading from the station."""

    @abstractmethod
    def render(self) -> str:
        """Return the text shown for the current state."""

    def display(self) -> None:
        self.output(self.render())

    def close(self) -> None:
        if self._handle is not None:
            self._station.registry.unsubscribe(self._handle)
            self._handle = None


class CurrentConditionsDisplay(Display):
    def __init__(self, station: WeatherStation, output: Callable[[str], None] = print) -> None:
        self.temperature: float | None = None
        self.humidity: float | None = None
        super().__init__(station, output)

    def update(self, measurements: Measurements) -> None:
        self.temperature = measurements.temperature
        self.humidity = measurements.humidity
        self.display()

    def render(self) -> str:
        if self.temperature is None or self.humidity is None:
            return "Current conditions: no readings yet"
        return (
            f"Current conditions: {self.temperature:.1f}F degrees "
            f"and {self.humidity:.1f}% humidity"
        )


class StatisticsDisplay(Display):
    def __init__(self, station: WeatherStation, output: Callable[[str], None] = print) -> None:
        self.readings: list[float] = []
        super().__init__(station, output)

    def update(self, measurements: Measurements) -> None:
        self.readings.append(measurements.temperature)
        self.display()

    def render(self) -> str:
        if not self.readings:
            return "Avg/Max/Min temperature = no readings yet"
        average = sum(self.readings) / len(self.readings)
        return (
            f"Avg/Max/Min temperature = {average:.1f}/"
            f"{max(self.readings):.1f}/{min(self.readings):.1f}"
        )


class ForecastDisplay(Display):
    """Pulls the previous pressure from its own state to guess the trend."""

    def __init__(self, station: WeatherStation, output: Callable[[str], None] = print) -> None:
        self.current_pressure: float | None = None
        self.last_pressure: float | None = None
        super().__init__(station, output)

    def update(self, measurements: Measurements) -> None:
        self.last_pressure = self.current_pressure
        self.current_pressure = measurements.pressure
        self.display()

    def render(self) -> str:
        if self.last_pressure is None or self.current_pressure == self.last_pressure:
            return "Forecast: More of the same"
        if self.current_pressure > self.last_pressure:
            return "Forecast: Improving weather on the way!"
        return "Forecast: Watch out for cooler, rainy weather"


def run_demo(
    registry: Registry | None = None, output: Callable[[str], None] = print
) -> list[str]:
    """Drive a station through three readings and return everything displayed."""
    lines: list[str] = []

    def emit(line: str) -> None:
        lines.append(line)
        output(line)

    station = WeatherStation(registry if registry is not None else Registry())
    displays = [
        CurrentConditionsDisplay(station, emit),
        StatisticsDisplay(station, emit),
        ForecastDisplay(station, emit),
    ]

    for reading in ((80, 65, 30.4), (82, 70, 29.2), (78, 90, 29.2)):
        result = station.set_measurements(*reading)
        if not result.ok:
            LOGGER.warning(
                "demo.display_failed",
                extra={"event": "demo.display_failed", "failures": len(result.failures)},
            )

    for display in displays:
        display.close()
    return lines
