"""
Application Configuration
Uses Pydantic Settings for environment-based configuration
"""

from enum import Enum

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra env vars like MARIADB_* used by docker-compose
    )

    # Application
    PROJECT_NAME: str = "Trust Engine"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(
        default="development", pattern="^(development|staging|production|test)$"
    )
    DEBUG: bool = Field(default=False)
    API_V1_STR: str = "/api/v1"

    # Security (tokens are minted by the identity service, we only verify them)
    SECRET_KEY: str = Field(default="change-me")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # CORS
    # Allow str because it can be a comma-separated string in .env
    CORS_ORIGINS: str | list[str] = Field(
        default=["http://localhost:5173", "http://localhost:8000"]
    )

    # Database
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./trust_engine.db")
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_ECHO: bool = False

    # Redis (counters, rate limits)
    REDIS_URL: str = Field(default="redis://localhost:6379/0")

    # Arq
    ARQ_REDIS_URL: str = Field(default="redis://localhost:6379/1")
    ARQ_MAX_TRIES: int = 3
    ARQ_KEEP_RESULT: int = 3600  # 1 hour

    # Email (reporter / appellant notifications)
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_TLS: bool = False
    SMTP_STARTTLS: bool = True
    SMTP_FROM_EMAIL: str = "moderation@example.org"
    SMTP_FROM_NAME: str = "Moderation Team"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str | None = None  # "console" or "json"; unset picks by ENVIRONMENT

    # Pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 50

    # Reports
    REPORT_RATE_LIMIT: int = 20  # Submissions per reporter per window
    REPORT_RATE_WINDOW_SECONDS: int = 3600
    REPORT_DESCRIPTION_MAX_LENGTH: int = 1000
    MODERATOR_NOTES_MAX_LENGTH: int = 2000

    # Priority scoring
    GEO_WEIGHT_ESCALATION_THRESHOLD: float = 0.7

    # Sanctions
    DEFAULT_SUSPENSION_DAYS: int = 7

    # Suspension sweep: "api" runs it inside the web process lifespan,
    # "worker" runs it as an arq cron job, "off" disables it
    SUSPENSION_SWEEP_MODE: str = Field(default="api", pattern="^(api|worker|off)$")
    SUSPENSION_SWEEP_INTERVAL_SECONDS: int = Field(default=300, ge=1)
    SUSPENSION_SWEEP_BATCH_SIZE: int = Field(default=100, ge=1)

    # Appeals
    APPEAL_LIMIT_PER_WINDOW: int = 3
    APPEAL_WINDOW_DAYS: int = 7

    # Brigading detection (candidate reports)
    BRIGADING_WINDOW_HOURS: int = 24
    BRIGADING_MAX_REPORTS_PER_HOUR: int = 10
    BRIGADING_LOW_WEIGHT_THRESHOLD: float = 0.3
    BRIGADING_LOW_WEIGHT_RATIO: float = 0.5

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string"""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v


# Create global settings instance

load_dotenv()
settings = Settings()


# Domain constants


class TargetKind(str, Enum):
    """Kinds of entity a report can point at"""

    POST = "POST"
    COMMENT = "COMMENT"
    USER = "USER"
    MESSAGE = "MESSAGE"
    CANDIDATE = "CANDIDATE"


class ReportReason(str, Enum):
    """Reason codes a reporter can choose from"""

    SPAM = "SPAM"
    HARASSMENT = "HARASSMENT"
    HATE_SPEECH = "HATE_SPEECH"
    MISINFORMATION = "MISINFORMATION"
    INAPPROPRIATE_CONTENT = "INAPPROPRIATE_CONTENT"
    FAKE_ACCOUNT = "FAKE_ACCOUNT"
    IMPERSONATION = "IMPERSONATION"
    COPYRIGHT_VIOLATION = "COPYRIGHT_VIOLATION"
    VIOLENCE_THREATS = "VIOLENCE_THREATS"
    SELF_HARM = "SELF_HARM"
    ILLEGAL_CONTENT = "ILLEGAL_CONTENT"
    OTHER = "OTHER"


# Reasons that start at HIGH instead of MEDIUM
SEVERE_REASONS = frozenset(
    {
        ReportReason.HATE_SPEECH,
        ReportReason.HARASSMENT,
        ReportReason.VIOLENCE_THREATS,
        ReportReason.SELF_HARM,
        ReportReason.ILLEGAL_CONTENT,
    }
)


class ReportStatus(str, Enum):
    """Report workflow states. RESOLVED is terminal."""

    PENDING = "PENDING"
    IN_REVIEW = "IN_REVIEW"
    RESOLVED = "RESOLVED"


OPEN_REPORT_STATUSES = (ReportStatus.PENDING, ReportStatus.IN_REVIEW)


class ReportPriority(str, Enum):
    """Priority tiers, lowest first"""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"

    @property
    def rank(self) -> int:
        return PRIORITY_ORDER.index(self)


PRIORITY_ORDER = (
    ReportPriority.LOW,
    ReportPriority.MEDIUM,
    ReportPriority.HIGH,
    ReportPriority.URGENT,
)


class AiUrgency(str, Enum):
    """Urgency labels supplied by the external scoring service"""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


# Labels that count as "critical" for escalation purposes
CRITICAL_AI_URGENCY = frozenset({AiUrgency.HIGH, AiUrgency.CRITICAL})


class ModerationAction(str, Enum):
    """Action codes written to the moderation log"""

    NO_ACTION = "NO_ACTION"
    CONTENT_HIDDEN = "CONTENT_HIDDEN"
    CONTENT_DELETED = "CONTENT_DELETED"
    USER_WARNED = "USER_WARNED"
    USER_SUSPENDED = "USER_SUSPENDED"
    USER_BANNED = "USER_BANNED"
    SUSPENSION_LIFTED = "SUSPENSION_LIFTED"
    SUSPENSION_EXPIRED = "SUSPENSION_EXPIRED"
    APPEAL_APPROVED = "APPEAL_APPROVED"
    APPEAL_DENIED = "APPEAL_DENIED"


# Actions a moderator may choose when resolving a report
REPORT_ACTIONS = frozenset(
    {
        ModerationAction.NO_ACTION,
        ModerationAction.CONTENT_HIDDEN,
        ModerationAction.CONTENT_DELETED,
        ModerationAction.USER_WARNED,
        ModerationAction.USER_SUSPENDED,
        ModerationAction.USER_BANNED,
    }
)


class WarningSeverity(str, Enum):
    """Warning severities"""

    MINOR = "MINOR"
    MODERATE = "MODERATE"
    MAJOR = "MAJOR"
    FINAL = "FINAL"


class SuspensionType(str, Enum):
    """Suspension types"""

    TEMPORARY = "TEMPORARY"
    PERMANENT = "PERMANENT"
    POSTING_RESTRICTED = "POSTING_RESTRICTED"
    COMMENTING_RESTRICTED = "COMMENTING_RESTRICTED"


# Types that set the blanket users.is_suspended flag
FULL_RESTRICTION_TYPES = (SuspensionType.TEMPORARY, SuspensionType.PERMANENT)


class AppealStatus(str, Enum):
    """Appeal review states"""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DENIED = "DENIED"


class FlagType(str, Enum):
    """Content flag categories"""

    SPAM = "SPAM"
    TOXICITY = "TOXICITY"
    HATE_SPEECH = "HATE_SPEECH"
    MISINFORMATION = "MISINFORMATION"
    INAPPROPRIATE_LANGUAGE = "INAPPROPRIATE_LANGUAGE"
    FAKE_ENGAGEMENT = "FAKE_ENGAGEMENT"
    DUPLICATE_CONTENT = "DUPLICATE_CONTENT"
    SUSPICIOUS_ACTIVITY = "SUSPICIOUS_ACTIVITY"
    POTENTIAL_BRIGADING = "POTENTIAL_BRIGADING"


class FlagSource(str, Enum):
    """Where a content flag came from"""

    AUTOMATED = "AUTOMATED"
    USER_REPORT = "USER_REPORT"
    MANUAL_REVIEW = "MANUAL_REVIEW"
