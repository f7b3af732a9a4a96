"""
Setup script for sproutling.

Sproutling is the adaptive review scheduler behind an early-learning app
for young children. It serves three roles:

1. Scheduling - Child-friendly SM-2 reviews of every practiced item
2. Lesson Building - Due reviews blended into each level's cards
3. Progress - Mastery statistics and the growth-stage garden

The 'sproutling' command is a terminal front end for parents and developers.
"""

from setuptools import find_packages, setup

setup(
    name="sproutling",
    version="1.0.0",
    description="Adaptive spaced-repetition review scheduler for early learners",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Sproutling",
    packages=find_packages(include=["sproutling", "sproutling.*"]),
    py_modules=["config"],
    package_data={"sproutling.content": ["data/*.json"]},
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy>=2.0.0",
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
        "postgres": [
            "psycopg2-binary>=2.9.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "sproutling=sproutling.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition sm2 education children",
)
