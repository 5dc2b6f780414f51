from setuptools import setup, find_namespace_packages

setup(
    name="dockside",
    version="0.1.0",
    packages=find_namespace_packages(where="src", include=["dockside", "dockside.*"]),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "docker>=7.0",
        "pydantic>=2.0",
        "pyyaml>=6.0",
        "click>=8.2",
        "python-dotenv>=1.0",
        "structlog>=23.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "requests>=2.26",
        ],
        "dev": [
            "black>=23.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "dockside=dockside.CLI.main:main",
        ],
    },
)
