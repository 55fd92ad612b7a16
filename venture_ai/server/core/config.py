"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from venture_ai.agent_core.policy.models import (
    ApprovalPolicy,
    LoopPolicy,
    PolicyConfig,
    TimeoutPolicy,
)

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class ModelConfig(BaseModel):
    """Model identifiers passed to pydantic-ai (``provider:model``)."""

    reasoning: str = Field(
        default="openai:gpt-4o", alias="VENTURE_AI_MODEL", description="Model used for the tool-calling loop"
    )
    router: str = Field(
        default="openai:gpt-4o-mini",
        alias="VENTURE_AI_ROUTER_MODEL",
        description="Model used for intent and approval classification",
    )

    model_config = {"populate_by_name": True}


class AgentLoopConfig(BaseModel):
    """Agent loop bounds, thresholds and timeouts."""

    max_iterations: int = Field(
        default=15, alias="VENTURE_AI_MAX_ITERATIONS", description="Maximum reasoning calls per turn"
    )
    confidence_threshold: float = Field(
        default=0.7,
        alias="VENTURE_AI_CONFIDENCE_THRESHOLD",
        description="Classifier confidence a verdict must exceed to count",
    )
    history_window: int = Field(
        default=20, alias="VENTURE_AI_HISTORY_WINDOW", description="Stored messages sent with each reasoning call"
    )
    reasoning_timeout: float = Field(
        default=60.0, alias="VENTURE_AI_REASONING_TIMEOUT", description="Reasoning call timeout in seconds"
    )
    classifier_timeout: float = Field(
        default=15.0, alias="VENTURE_AI_CLASSIFIER_TIMEOUT", description="Classifier call timeout in seconds"
    )
    tool_timeout: float = Field(
        default=60.0, alias="VENTURE_AI_TOOL_TIMEOUT", description="Tool execution timeout in seconds"
    )

    model_config = {"populate_by_name": True}


class ContextCacheConfig(BaseModel):
    """Conversation context cache limits."""

    max_contexts: int = Field(
        default=200, alias="VENTURE_AI_MAX_CONTEXTS", description="Maximum cached conversation contexts"
    )
    ttl_seconds: float = Field(
        default=3600.0,
        alias="VENTURE_AI_CONTEXT_TTL_SECONDS",
        description="Idle time before a cached context is reloaded",
    )
    max_messages: int = Field(
        default=50, alias="VENTURE_AI_MAX_MESSAGES", description="Messages retained per conversation"
    )

    model_config = {"populate_by_name": True}


class TavilyConfig(BaseModel):
    """Tavily research API configuration."""

    api_key: Optional[str] = Field(
        default=None, alias="TAVILY_API_KEY", description="Tavily API key; research tools are disabled without it"
    )

    model_config = {"populate_by_name": True}


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS", description="Allowed CORS origins (use * for all)")
    allow_credentials: bool = Field(
        default=True, alias="CORS_ALLOW_CREDENTIALS", description="Allow credentials in CORS requests"
    )
    allow_methods: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_METHODS", description="Allowed HTTP methods (use * for all)"
    )
    allow_headers: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_HEADERS", description="Allowed HTTP headers (use * for all)"
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    # =====================================================================
    # Venture-AI Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="Venture-AI server host address to bind to",
        alias="VENTURE_AI_SERVER_HOST",
    )
    server_port: int = Field(
        default=8000,
        description="Venture-AI server port number",
        alias="VENTURE_AI_SERVER_PORT",
    )
    log_level: str = Field(
        default="INFO",
        description="Venture-AI server logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="VENTURE_AI_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Log line format (simple, detailed, json)",
        alias="LOG_FORMAT",
    )
    enable_file_logging: bool = Field(
        default=False,
        description="Also write DEBUG logs to LOG_FILE_DIR",
        alias="ENABLE_FILE_LOGGING",
    )

    # =====================================================================
    # Database Configuration
    # =====================================================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./venture_ai.db",
        description="Async SQLAlchemy connection URL for the application database",
        alias="DATABASE_URL",
    )

    # =====================================================================
    # Flat fields backing the grouped configurations
    # =====================================================================
    reasoning_model: str = Field(default="openai:gpt-4o", alias="VENTURE_AI_MODEL")
    router_model: str = Field(default="openai:gpt-4o-mini", alias="VENTURE_AI_ROUTER_MODEL")
    max_iterations: int = Field(default=15, alias="VENTURE_AI_MAX_ITERATIONS")
    confidence_threshold: float = Field(default=0.7, alias="VENTURE_AI_CONFIDENCE_THRESHOLD")
    history_window: int = Field(default=20, alias="VENTURE_AI_HISTORY_WINDOW")
    reasoning_timeout: float = Field(default=60.0, alias="VENTURE_AI_REASONING_TIMEOUT")
    classifier_timeout: float = Field(default=15.0, alias="VENTURE_AI_CLASSIFIER_TIMEOUT")
    tool_timeout: float = Field(default=60.0, alias="VENTURE_AI_TOOL_TIMEOUT")
    max_contexts: int = Field(default=200, alias="VENTURE_AI_MAX_CONTEXTS")
    context_ttl_seconds: float = Field(default=3600.0, alias="VENTURE_AI_CONTEXT_TTL_SECONDS")
    max_messages: int = Field(default=50, alias="VENTURE_AI_MAX_MESSAGES")
    tavily_api_key: Optional[str] = Field(default=None, alias="TAVILY_API_KEY")
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(default=["*"], alias="CORS_ALLOW_METHODS")
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def models(self) -> ModelConfig:
        """Get model identifiers from environment variables."""
        return ModelConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def agent_loop(self) -> AgentLoopConfig:
        """Get agent loop configuration from environment variables."""
        return AgentLoopConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def context_cache(self) -> ContextCacheConfig:
        """Get context cache configuration from environment variables."""
        return ContextCacheConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def tavily(self) -> TavilyConfig:
        """Get Tavily configuration from environment variables."""
        return TavilyConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))

    def to_policy_config(self) -> PolicyConfig:
        """Map the agent loop settings onto the core ``PolicyConfig``."""
        loop = self.agent_loop
        return PolicyConfig(
            loop_policy=LoopPolicy(max_iterations=loop.max_iterations, history_window=loop.history_window),
            approval_policy=ApprovalPolicy(confidence_threshold=loop.confidence_threshold),
            timeout_policy=TimeoutPolicy(
                reasoning_seconds=loop.reasoning_timeout,
                classifier_seconds=loop.classifier_timeout,
                tool_seconds=loop.tool_timeout,
            ),
        )


settings = Settings()
