"""Static demonstration results returned when genuine analysis is unavailable.

Every call builds a fresh value so callers may mutate what they receive.
"""

from buildscope.analysis.types import (
    CompilationAnalysisResult,
    ManifestAnalysisResult,
    RecipeStep,
)


def fallback_recipe_steps() -> list[RecipeStep]:
    return [
        {
            "instruction": "FROM python:3.9-slim",
            "description": "Sets the base image to Python 3.9 slim version",
            "impact": "Downloads ~45MB base image",
            "buildTime": "10-30 seconds",
            "computeIntensity": "low",
        },
        {
            "instruction": "WORKDIR /app",
            "description": "Creates and sets working directory to /app",
            "impact": "Minimal impact, creates directory structure",
            "buildTime": "<1 second",
            "computeIntensity": "low",
        },
        {
            "instruction": "COPY requirements.txt .",
            "description": "Copies requirements file to container",
            "impact": "Small file copy, ~1KB typically",
            "buildTime": "<1 second",
            "computeIntensity": "low",
        },
        {
            "instruction": "RUN pip install -r requirements.txt",
            "description": "Installs Python dependencies",
            "impact": "Variable impact based on requirements",
            "buildTime": "1-5 minutes",
            "computeIntensity": "high",
        },
        {
            "instruction": "COPY . .",
            "description": "Copies application source code",
            "impact": "Depends on application size",
            "buildTime": "1-5 seconds",
            "computeIntensity": "low",
        },
        {
            "instruction": "EXPOSE 8000",
            "description": "Exposes port 8000 for the application",
            "impact": "No storage impact, configures networking",
            "buildTime": "<1 second",
            "computeIntensity": "low",
        },
        {
            "instruction": 'CMD ["python", "app.py"]',
            "description": "Sets the default command to run the application",
            "impact": "No additional impact, sets runtime behavior",
            "buildTime": "<1 second",
            "computeIntensity": "low",
        },
    ]


def fallback_manifest_analysis() -> ManifestAnalysisResult:
    return {
        "items": [
            {
                "name": "flask==2.3.3",
                "estimatedSize": "2.1 MB",
                "description": "Web framework for Python applications",
                "compilationRequired": False,
            },
            {
                "name": "numpy==1.24.3",
                "estimatedSize": "15.8 MB",
                "description": "Scientific computing library",
                "compilationRequired": False,
            },
            {
                "name": "pandas==2.0.3",
                "estimatedSize": "28.4 MB",
                "description": "Data manipulation and analysis library",
                "compilationRequired": False,
            },
            {
                "name": "requests==2.31.0",
                "estimatedSize": "1.5 MB",
                "description": "HTTP library for API requests",
                "compilationRequired": False,
            },
            {
                "name": "sqlalchemy==2.0.20",
                "estimatedSize": "3.2 MB",
                "description": "Database toolkit and ORM",
                "compilationRequired": False,
            },
        ],
        "totalSize": "51.0 MB",
    }


def fallback_compilation_analysis() -> CompilationAnalysisResult:
    return {
        "totalEstimatedTime": "3-6 minutes",
        "bottlenecks": [
            "Dependency installation (pip install) dominates build time",
            "Large scientific packages (numpy, pandas) download slowly on limited bandwidth",
            "Copying the full build context invalidates later layers on every change",
        ],
        "recommendations": [
            "Copy the dependency manifest and install before copying application code",
            "Use pre-built wheels and pin versions to avoid source builds",
            "Enable BuildKit cache mounts for the pip cache",
            "Add a .dockerignore to shrink the build context",
        ],
        "parallelizable": True,
    }
