"""Prompt templates for the three analyses."""

from __future__ import annotations

import json

from buildscope.analysis.capabilities import ComputeCapabilities, describe_capabilities

RECIPE_PROMPT = """\
Analyze this Dockerfile and provide a detailed breakdown of each instruction:

{content}

For each instruction, in the order it appears, provide:
1. The exact instruction
2. A clear description of what it does
3. The impact on image size or build time
4. An estimated build time for the step
5. Its compute intensity: one of low, medium, high, extreme

Return the response as a JSON array with objects containing: \
instruction, description, impact, buildTime, computeIntensity
"""

MANIFEST_PROMPT = """\
Analyze this requirements.txt file and estimate the size of each package:

{content}

For each package, in the order it appears, provide:
1. The package name with version
2. Estimated download size
3. Brief description of what the package does
4. Whether it requires native compilation when installed, and if so how long it takes

Also calculate the total estimated size.
Return as JSON with: \
{{ "items": [{{ "name", "estimatedSize", "description", "compilationRequired", "buildTime" }}], \
"totalSize": "XX.X MB" }}
"""

COMPILATION_PROMPT = """\
Estimate how long building this container image will take on the machine described below.

Compute capabilities:
{capabilities}

Dockerfile:
{recipe}

requirements.txt:
{manifest}

Consider CPU and memory limits, cross-architecture emulation, dependency compilation, \
network downloads and layer caching for the given environment.
Return as JSON with: \
{{ "totalEstimatedTime": "human readable duration", "bottlenecks": ["..."], \
"recommendations": ["..."], "parallelizable": true or false }}
"""

_EMPTY = "(not provided)"


def recipe_prompt(content: str) -> str:
    return RECIPE_PROMPT.format(content=content)


def manifest_prompt(content: str) -> str:
    return MANIFEST_PROMPT.format(content=content)


def compilation_prompt(
    recipe: str,
    manifest: str,
    capabilities: ComputeCapabilities,
) -> str:
    described = describe_capabilities(capabilities)
    return COMPILATION_PROMPT.format(
        capabilities=json.dumps(described, indent=2),
        recipe=recipe.strip() or _EMPTY,
        manifest=manifest.strip() or _EMPTY,
    )
