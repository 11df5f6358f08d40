"""Tests for the weather station demo built on the registry."""

from __future__ import annotations

import unittest

from observerkit.demo import (
    MEASUREMENTS_TOPIC,
    CurrentConditionsDisplay,
    Display,
    ForecastDisplay,
    Measurements,
    StatisticsDisplay,
    WeatherStation,
    run_demo,
)
from observerkit.registry import Registry


class WeatherStationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = Registry()
        self.station = WeatherStation(self.registry)
        self.lines: list[str] = []

    def test_displays_subscribe_on_construction_and_close(self) -> None:
        current = CurrentConditionsDisplay(self.station, self.lines.append)
        StatisticsDisplay(self.station, self.lines.append)
        self.assertEqual(self.registry.subscriber_count(MEASUREMENTS_TOPIC), 2)

        current.close()
        current.close()
        self.assertEqual(self.registry.subscriber_count(MEASUREMENTS_TOPIC), 1)

    def test_push_updates_all_displays(self) -> None:
        current = CurrentConditionsDisplay(self.station, self.lines.append)
        stats = StatisticsDisplay(self.station, self.lines.append)

        result = self.station.set_measurements(80, 65, 30.4)
        self.assertTrue(result.ok)
        self.assertEqual(result.delivered, 2)
        self.assertEqual(current.temperature, 80)
        self.assertEqual(stats.readings, [80])
        self.assertEqual(self.station.latest, Measurements(80, 65, 30.4))
        self.assertEqual(
            self.lines,
            [
                "Current conditions: 80.0F degrees and 65.0% humidity",
                "Avg/Max/Min temperature = 80.0/80.0/80.0",
            ],
        )

    def test_forecast_trend(self) -> None:
        forecast = ForecastDisplay(self.station, self.lines.append)
        self.station.set_measurements(80, 65, 30.0)
        self.station.set_measurements(80, 65, 31.0)
        self.station.set_measurements(80, 65, 29.0)
        self.assertEqual(
            self.lines,
            [
                "Forecast: More of the same",
                "Forecast: Improving weather on the way!",
                "Forecast: Watch out for cooler, rainy weather",
            ],
        )
        forecast.close()

    def test_display_base_is_abstract(self) -> None:
        with self.assertRaises(TypeError):
            Display(self.station, self.lines.append)  # type: ignore[abstract]
        self.assertEqual(self.registry.subscriber_count(MEASUREMENTS_TOPIC), 0)

    def test_display_before_first_reading(self) -> None:
        CurrentConditionsDisplay(self.station, self.lines.append).display()
        StatisticsDisplay(self.station, self.lines.append).display()
        ForecastDisplay(self.station, self.lines.append).display()
        self.assertEqual(
            self.lines,
            [
                "Current conditions: no readings yet",
                "Avg/Max/Min temperature = no readings yet",
                "Forecast: More of the same",
            ],
        )

    def test_closed_display_stops_receiving(self) -> None:
        current = CurrentConditionsDisplay(self.station, self.lines.append)
        current.close()
        self.station.set_measurements(70, 50, 30.0)
        self.assertEqual(self.lines, [])


class RunDemoTests(unittest.TestCase):
    def test_run_demo_emits_all_displays_and_cleans_up(self) -> None:
        registry = Registry()
        printed: list[str] = []
        lines = run_demo(registry, output=printed.append)

        self.assertEqual(lines, printed)
        self.assertEqual(len(lines), 9)
        self.assertEqual(lines[0], "Current conditions: 80.0F degrees and 65.0% humidity")
        self.assertEqual(lines[-1], "Forecast: More of the same")
        self.assertEqual(len(registry), 0)


if __name__ == "__main__":
    unittest.main()
