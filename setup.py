"""
Setup script for adventure-workshop.

Adventure is the execution engine behind terminal workshops: it shows
exercise instructions, runs an exercise's ``run``/``verify`` modes against
the learner's work, and keeps track of completed exercises.

Workshops are built on top of it:

    from adventure import Workshop, WorkshopOptions

    workshop = Workshop(WorkshopOptions(name="learnyoupython", app_dir=__file__))
    workshop.add_all()
    workshop.execute()
"""

from setuptools import find_packages, setup

setup(
    name="adventure-workshop",
    version="1.0.0",
    description="Terminal workshop runner for self-checking exercises",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["adventure", "adventure.*"]),
    py_modules=["config"],
    package_data={"adventure.i18n": ["locales/*.json"]},
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
)
