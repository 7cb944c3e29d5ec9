"""Compute capability record and the selectable tiers offered to users."""

from pydantic import BaseModel, ConfigDict

from buildscope.analysis.types import Architecture, Environment, Tier


class ComputeCapabilities(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    cpu: Tier = "medium"
    memory: Tier = "medium"
    architecture: Architecture = "x86_64"
    environment: Environment = "local"


CAPABILITY_OPTIONS: dict[str, list[dict[str, str]]] = {
    "cpu": [
        {"value": "low", "label": "Low", "description": "1-2 cores, <2GHz"},
        {"value": "medium", "label": "Medium", "description": "4 cores, 2-3GHz"},
        {"value": "high", "label": "High", "description": "8+ cores, 3GHz+"},
        {"value": "extreme", "label": "Extreme", "description": "16+ cores, server-grade"},
    ],
    "memory": [
        {"value": "low", "label": "Low", "description": "4-8 GB"},
        {"value": "medium", "label": "Medium", "description": "16-32 GB"},
        {"value": "high", "label": "High", "description": "64+ GB"},
        {"value": "extreme", "label": "Extreme", "description": "128+ GB"},
    ],
    "architecture": [
        {"value": "x86_64", "label": "x86_64", "description": "Intel/AMD 64-bit"},
        {"value": "arm64", "label": "ARM64", "description": "Apple Silicon, ARM"},
        {"value": "multi", "label": "Multi-arch", "description": "Building for multiple"},
    ],
    "environment": [
        {"value": "local", "label": "Local", "description": "Development machine"},
        {"value": "ci_cd", "label": "CI/CD", "description": "GitHub Actions, etc."},
        {"value": "cloud", "label": "Cloud", "description": "AWS, GCP, Azure"},
    ],
}


def describe_option(field: str, value: str) -> str:
    for option in CAPABILITY_OPTIONS.get(field, []):
        if option["value"] == value:
            return f"{option['label']} ({option['description']})"
    return value


def describe_capabilities(capabilities: ComputeCapabilities) -> dict[str, str]:
    return {
        field: describe_option(field, str(getattr(capabilities, field)))
        for field in CAPABILITY_OPTIONS
    }
