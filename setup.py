"""
Packaging for httpmetrics: Prometheus request metrics for Starlette / FastAPI.
"""
from setuptools import setup, find_packages

setup(
    name="httpmetrics",
    version="0.1.0",
    packages=find_packages(include=["httpmetrics", "httpmetrics.*"]),
    python_requires=">=3.9",
    install_requires=[
        "prometheus-client>=0.17",
        "starlette>=0.35",
        "fastapi>=0.110",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "uvicorn>=0.23",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
            "httpx>=0.24",
        ],
    },
)
