import setuptools

try:
    with open("README.md", "r", encoding="utf-8") as fh:
        long_description = fh.read()
except FileNotFoundError:
    long_description = "Build, release and deploy applications on NAIS"

setuptools.setup(
    name="nais-build",
    version="0.1.0",
    description="Build, release and deploy applications on NAIS",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src", include=["nais_build", "nais_build.*"]),
    package_data={
        "nais_build": ["default.toml"],
    },
    include_package_data=True,
    install_requires=[
        "typer",
        "rich",
        "httpx",
        "pydantic>=2",
        "python-dotenv",
        "google-auth",
        "requests",
        "PyYAML",
        'tomli; python_version < "3.11"',
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "nb=nais_build.cli.main:app",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
)
