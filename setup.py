from setuptools import setup, find_packages

setup(
    name="relay-engine",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "pony>=0.7.19",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "PyYAML>=6.0",
        "click>=8.1.3",
        "tabulate>=0.9.0",
        "httpx>=0.25",
        "PyNaCl>=1.5",
        "fastapi>=0.104",
        "uvicorn>=0.24",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
    },
    entry_points={
        "console_scripts": [
            "relay-engine=relay_engine.cli:main",
        ],
    },
    python_requires=">=3.8",
)
