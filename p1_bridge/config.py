"""Configuration module using pydantic for environment-based settings."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # P1 serial port (DSMR 4.x/5.x: 115200 8N1)
    SERIAL_PORT: str = "/dev/ttyUSB0"
    SERIAL_BAUDRATE: int = 115200
    SERIAL_BYTESIZE: int = 8  # 7 or 8
    SERIAL_PARITY: Literal["N", "E", "O"] = "N"
    SERIAL_STOPBITS: int = 1
    SERIAL_TIMEOUT_S: float = 12.0  # a telegram arrives every 1-10s; stop() waits this + 2s
    MAX_LINE_LENGTH: int = 250

    # Control settings
    MAX_CONSEC_ERRORS: int = 10  # Max consecutive errors before stopping
    LOG_LEVEL: str = "INFO"
    VERBOSE: bool = False  # Log every telegram line

    # MQTT Configuration
    MQTT_HOST: str = "localhost"
    MQTT_PORT: int = 1883
    MQTT_USERNAME: str | None = None
    MQTT_PASSWORD: str | None = None
    MQTT_TLS: bool = False
    MQTT_CLIENT_ID: str = "dsmr4"
    MQTT_QOS: int = 1
    MQTT_RETAIN: bool = True  # readers get the latest reading on subscribe
    MQTT_TOPIC: str = "sensor/{device_id}"

    # Device identification
    DEVICE_ID: str = "dsmr4"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    @property
    def topic(self) -> str:
        return self.MQTT_TOPIC.format(device_id=self.DEVICE_ID)


settings = Settings()
