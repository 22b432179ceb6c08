"""Weather forecasts for the client app."""

from schedule_assistant.weather.service import WeatherService, parse_coordinates

__all__ = ["WeatherService", "parse_coordinates"]
