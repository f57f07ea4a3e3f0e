"""Setup configuration for ContractLens."""

from setuptools import setup, find_packages

# Read the README file
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="contractlens",
    version="1.0.0",
    author="ContractLens Team",
    description="Contract type detection and AI risk/opportunity analysis for uploaded PDFs",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    packages=find_packages(where="src", exclude=["tests", "tests.*"]),
    package_dir={"": "src"},
    py_modules=["main"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Framework :: FastAPI",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        # Core web framework
        "fastapi>=0.109.0",
        "uvicorn[standard]>=0.25.0",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        # Database
        "sqlalchemy>=2.0.0",
        "asyncpg>=0.29.0",
        "alembic>=1.13.0",
        "greenlet>=3.0.0",
        # Cache
        "redis>=5.0.0",
        # HTTP
        "httpx>=0.25.0",
        # Auth/Security
        "python-jose[cryptography]>=3.3.0",
        # Documents and model output
        "pdfplumber>=0.10.0",
        "python-multipart>=0.0.6",
        "json-repair>=0.25.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
            "pytest-cov>=4.1.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.5.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "contractlens=main:main",
        ],
    },
    keywords=[
        "contracts",
        "pdf",
        "llm",
        "fastapi",
    ],
)
