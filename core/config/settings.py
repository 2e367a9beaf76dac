# Complete settings for the order gateway
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator
from enum import Enum
from typing import Dict, List
from pathlib import Path


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class VendorEndpoints(BaseModel):
    """Paths appended to the vendor base endpoint"""
    order_entry: str = "/OrderEntry"
    order_modify: str = "/OrderModify"
    bracket_order_entry: str = "/BoOrderEntry"
    bracket_order_modify: str = "/BoOrderModify"
    cover_order_entry: str = "/CoOrderEntry"
    cover_order_modify: str = "/CoOrderModify"
    order_book: str = "/OrderBook"
    net_position: str = "/NetPosition"
    convert_position: str = "/ConvertPosition"


class VendorSettings(BaseModel):
    # Base endpoint of the vendor order-routing API
    endpoint: str = "http://localhost:9090/rupeeseed"
    # Static headers sent with every vendor call
    headers: Dict[str, str] = Field(
        default_factory=lambda: {"Content-Type": "application/json"}
    )
    source: str = "M"
    success_status: str = "success"
    # Vendor error code reserved for OMS-level rejections of a conversion
    oms_error_code: str = "RS-0022"
    # Vendor error code -> HTTP class (400|500); merged over the built-in table
    error_codes: Dict[str, int] = {}
    endpoints: VendorEndpoints = VendorEndpoints()

    # Timeout classes (milliseconds)
    short_timeout_ms: int = 700
    long_timeout_ms: int = 1000

    # Constants sent with position requests
    market_type: str = "NL"
    user_type: str = "C"
    interop_flag: str = "IP"

    @field_validator('endpoint')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator('error_codes')
    @classmethod
    def validate_error_classes(cls, v):
        """Only 400 and 500 classes are meaningful to the classifier"""
        invalid = {code: status for code, status in v.items() if status not in (400, 500)}
        if invalid:
            raise ValueError(f"Unsupported HTTP classes for vendor codes: {invalid}")
        return v

    def url(self, path: str) -> str:
        return self.endpoint + path


class LoggingSettings(BaseModel):
    level: str = "INFO"
    json_format: bool = True
    # Channel-specific levels
    api_level: str = "INFO"
    trading_level: str = "INFO"
    # Keys scrubbed from structured log events
    redact_keys: list[str] = [
        "authorization", "access_token", "api_key", "password", "secret", "token"
    ]


class APISettings(BaseModel):
    # CORS settings
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )
    cors_methods: List[str] = Field(
        default=["GET", "POST", "PUT", "OPTIONS"],
        description="Allowed CORS methods"
    )
    cors_headers: List[str] = Field(
        default=["Authorization", "Content-Type", "X-Request-ID", "X-User-Id"],
        description="Allowed CORS headers"
    )
    cors_credentials: bool = Field(
        default=True,
        description="Allow credentials in CORS requests"
    )
    # Header populated by the upstream authentication layer
    identity_header: str = "X-User-Id"
    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator('cors_origins')
    def validate_cors_origins(cls, v):
        """Validate CORS origins configuration"""
        if "*" in v and len(v) > 1:
            raise ValueError("Cannot mix '*' with specific origins")
        return v


class Settings(BaseSettings):
    """Main application settings, loaded from environment variables"""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore"
    )

    app_name: str = "Equity Order Gateway"
    version: str = "1.0.0"
    environment: Environment = Environment.DEVELOPMENT

    vendor: VendorSettings = VendorSettings()
    logging: LoggingSettings = LoggingSettings()
    api: APISettings = APISettings()

    @property
    def base_dir(self) -> str:
        """Get base application directory dynamically"""
        # Go up 2 levels from core/config/settings.py to reach project root
        return str(Path(__file__).resolve().parents[2])


# No global settings instance - use dependency injection instead
