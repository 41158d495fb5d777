from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Yelp: venue search and reservations (mock inventory when key is empty)
    yelp_api_key: str = ""
    yelp_base_url: str = "https://api.yelp.com/v3"
    yelp_timeout_seconds: float = 10.0
    yelp_max_retries: int = 3
    yelp_search_limit: int = 20

    # Booking
    booking_currency: str = "USD"
    multi_booking_delay_seconds: float = 0.2
    simulated_booking_failure_rate: float = 0.0

    # CORS
    cors_origins: str = "http://localhost:3000"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def use_mock_provider(self) -> bool:
        return not self.yelp_api_key

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
