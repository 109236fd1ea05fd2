"""Setup configuration for wttp-handler package."""

from setuptools import find_packages, setup
from pathlib import Path

# Read the README file
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

setup(
    name="wttp-handler",
    version="0.3.0",
    author="TechnicallyWeb3",
    description="Fetch WTTP resources as ordinary HTTP responses",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/TechnicallyWeb3/wttp-handler",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    classifiers=[
        # Development Status
        "Development Status :: 4 - Beta",
        # Intended Audience
        "Intended Audience :: Developers",
        # Environment
        "Framework :: AsyncIO",
        # Topic
        "Topic :: Internet :: WWW/HTTP",
        "Topic :: Software Development :: Libraries :: Python Modules",
        # Operating System
        "Operating System :: OS Independent",
        # Programming Language
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Programming Language :: Python :: 3 :: Only",
        # Typing
        "Typing :: Typed",
    ],
    python_requires=">=3.10",
    install_requires=[
        "aiohttp>=3.9.0",
        "multidict>=6.0.0",
        "pydantic>=2.0.0",
        "pyyaml>=6.0",
        "eth-utils>=2.0.0",
        "eth-hash[pycryptodome]>=0.5.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "black>=23.0.0",
            "mypy>=1.0.0",
            "ruff>=0.1.0",
        ],
    },
)
