import os
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class ExecutorConfig(BaseModel):
    """Configuration settings for the Kubernetes executor."""

    # Cluster access
    namespace: str = Field(default_factory=lambda: os.environ.get("KUBESHIP_NAMESPACE", "default"))
    kubeconfig: Optional[str] = Field(
        default_factory=lambda: os.environ.get("KUBECONFIG") or None,
        description="Path to a kubeconfig file. In-cluster config is tried first when unset.",
    )
    context: Optional[str] = Field(
        default_factory=lambda: os.environ.get("KUBESHIP_CONTEXT") or None,
        description="Kubeconfig context to use instead of the current one.",
    )

    # Readiness polling
    poll_interval: float = Field(
        default_factory=lambda: os.environ.get("KUBESHIP_POLL_INTERVAL", "1.0"),
        validate_default=True,
        description="Seconds to sleep between pod lookups.",
    )
    wait_timeout: Optional[float] = Field(
        default_factory=lambda: os.environ.get("KUBESHIP_WAIT_TIMEOUT"),
        validate_default=True,
        description="Upper bound in seconds for the readiness wait. None waits forever.",
    )

    @field_validator("namespace")
    @classmethod
    def _validate_namespace(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Namespace cannot be empty.")
        return value.strip()

    @field_validator("poll_interval", "wait_timeout", mode="before")
    @classmethod
    def _strip_env_value(cls, value: Any) -> Any:
        # Env values arrive as raw strings; blank means unset.
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("poll_interval")
    @classmethod
    def _validate_poll_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Poll interval must be positive.")
        return value

    @field_validator("wait_timeout")
    @classmethod
    def _validate_wait_timeout(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError("Wait timeout must be positive when set.")
        return value

    @property
    def uses_explicit_kubeconfig(self) -> bool:
        """True when a kubeconfig file or context was requested explicitly."""
        return bool(self.kubeconfig or self.context)
