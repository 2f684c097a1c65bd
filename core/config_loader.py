import yaml
import os
from typing import List, Optional, Dict
from pydantic import BaseModel, Field

SERVICE_NAMES = ("accounts", "matchmaking", "videocall", "chat", "appointment")


class ServiceDatabaseConfig(BaseModel):
    url: str = "sqlite:///:memory:"
    echo: bool = False


class ScoringWeights(BaseModel):
    """
    Weights for the compatibility score.

    The four weights sum to 1.0, so the unclamped score already stays in
    [0, 1] for ratings on the configured scale.
    """
    skill_match: float = 0.40
    rating: float = 0.20
    schedule_overlap: float = 0.30
    exchange_bonus: float = 0.10

    # Ratings are expected on a 0..rating_scale range
    rating_scale: float = 5.0

    # Overlap used for a dimension (days or times) when either side is empty
    neutral_overlap: float = 0.5


class MatchingConfig(BaseModel):
    """Candidate ranking policy and match request lifecycle settings."""
    min_compatibility_score: float = 0.0  # 0-1, filter threshold
    top_k: Optional[int] = None  # None = return all ranked candidates
    request_expiry_days: int = 7
    default_session_duration_minutes: int = 60


class MessagingConfig(BaseModel):
    """
    Configuration for cross-service event delivery.

    When use_async_queue is False events are dispatched in-process.
    """
    use_async_queue: bool = False
    redis_url: str = "redis://localhost:6379/0"
    queue_prefix: str = "skillswap-events"
    # Events for one aggregate always land on the same partition queue
    partitions: int = 4
    retry_max: int = 3
    retry_intervals: List[int] = Field(default_factory=lambda: [30, 60, 120])
    job_timeout: str = "5m"
    result_ttl: int = 86400
    enqueue_attempts: int = 3
    enqueue_wait_seconds: float = 1.0


class AppConfig(BaseModel):
    services: Dict[str, ServiceDatabaseConfig] = Field(
        default_factory=lambda: {name: ServiceDatabaseConfig() for name in SERVICE_NAMES}
    )
    scoring: ScoringWeights = Field(default_factory=ScoringWeights)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    messaging: MessagingConfig = Field(default_factory=MessagingConfig)

    def database_for(self, service: str) -> ServiceDatabaseConfig:
        return self.services.get(service) or ServiceDatabaseConfig()


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from root), try the project root
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    data = {}
    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}

    # Allow env var override for each service's DB URL, e.g. MATCHMAKING_DATABASE_URL
    for service in SERVICE_NAMES:
        env_db_url = os.environ.get(f"{service.upper()}_DATABASE_URL")
        if env_db_url:
            services = data.setdefault('services', {}) or {}
            data['services'] = services
            if services.get(service) is None:
                services[service] = {}
            services[service]['url'] = env_db_url

    # Allow env var override for Redis URL
    env_redis_url = os.environ.get("REDIS_URL")
    if env_redis_url:
        if data.get('messaging') is None:
            data['messaging'] = {}
        data['messaging']['redis_url'] = env_redis_url

    return AppConfig(**data)
