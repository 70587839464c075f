"""Weather widget response schema."""
from dashboard.schemas.base import CamelORMModel


class WeatherResponse(CamelORMModel):
    city: str
    country: str
    temperature: int
    description: str
    humidity: int
    wind_speed: float
    icon: str
