"""Shared data models describing the desired shape of a deployment."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator


class RuntimeSpec(BaseModel):
    """Desired runtime shape for a single containerized workload."""

    image: Optional[str] = Field(default=None, description="Container image reference (registry/repo:tag).")
    name: Optional[str] = Field(default=None, description="Name shared by the Deployment, Service and app label.")
    replicas: int = Field(default=1, description="Number of pod replicas to request.")
    ports: List[int] = Field(default_factory=list, description="Container ports to expose, in order.")
    public_address: bool = Field(
        default=False,
        description="Expose the ports through a load-balanced Service instead of a cluster-internal one.",
    )

    @field_validator("image", "name")
    @classmethod
    def _strip_whitespace(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value is not None else None

    @field_validator("replicas")
    @classmethod
    def _validate_replicas(cls, replicas: int) -> int:
        if replicas < 0:
            raise ValueError("Replicas must be >= 0.")
        return replicas

    @field_validator("ports")
    @classmethod
    def _validate_ports(cls, ports: List[int]) -> List[int]:
        for port in ports:
            if not 1 <= port <= 65535:
                raise ValueError(f"Port {port} is outside the valid range 1-65535.")
        return ports

    def with_overrides(self, **overrides: Any) -> "RuntimeSpec":
        """Return a copy with the non-None overrides applied and re-validated."""
        values = self.model_dump()
        values.update({key: value for key, value in overrides.items() if value is not None})
        return RuntimeSpec.model_validate(values)


def load_runtime_spec(path: Path) -> RuntimeSpec:
    """
    Load a runtime spec from a YAML or JSON file.

    Keys may be written in snake_case or camelCase (``publicAddress``).

    Raises:
        FileNotFoundError: When the file does not exist.
        pydantic.ValidationError: When the content does not describe a valid spec.
    """
    if not path.exists():
        raise FileNotFoundError(f"Runtime spec file not found: {path}")

    text = path.read_text()
    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text) or {}

    if "publicAddress" in data:
        data["public_address"] = data.pop("publicAddress")

    return RuntimeSpec.model_validate(data)
