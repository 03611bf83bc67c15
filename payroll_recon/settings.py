from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from payroll_recon.models import EngineConfig
from payroll_recon.services.timeparse import parse_clock_minutes


class Settings(BaseSettings):
    app_name: str = "PayrollRecon"
    cors_allow_origins: str = "http://127.0.0.1:5173,http://localhost:5173"
    log_level: str = "INFO"

    # Engine tunables. Employees whose company/department text names neither
    # "staff" nor "worker" fall back to staff_by_default.
    staff_by_default: bool = True
    standard_start: str = "08:30"
    evening_shift_start: str = "13:15"
    adj_p_half_day_minutes: int = 240
    include_less_than_4_hours: bool = False
    staff_relaxation_minutes: int = 240
    maintenance_ot_factor: float = 0.95

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_cors_origins() -> list[str]:
    raw = get_settings().cors_allow_origins
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_engine_config() -> EngineConfig:
    settings = get_settings()
    defaults = EngineConfig()
    return EngineConfig(
        staff_by_default=settings.staff_by_default,
        standard_start_minutes=parse_clock_minutes(settings.standard_start) or defaults.standard_start_minutes,
        evening_shift_start_minutes=(
            parse_clock_minutes(settings.evening_shift_start) or defaults.evening_shift_start_minutes
        ),
        adj_p_half_day_minutes=max(0, settings.adj_p_half_day_minutes),
        include_less_than_4_hours=settings.include_less_than_4_hours,
        staff_relaxation_minutes=max(0, settings.staff_relaxation_minutes),
        maintenance_ot_factor=settings.maintenance_ot_factor,
    )
