from setuptools import setup, find_packages

setup(
    name="panel_relay",
    version="0.1.0",
    packages=find_packages(include=["panel_relay", "panel_relay.*"]),
    python_requires=">=3.9",
    install_requires=[
        "fastapi>=0.104.0",
        "uvicorn>=0.24.0",
        "requests>=2.31.0",
        "python-dotenv>=1.0.0",
        "pydantic>=2.6.0",
        "pydantic-settings>=2.0.0",
        "loguru>=0.7.2",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "httpx>=0.25.0",
        ],
    },
)
