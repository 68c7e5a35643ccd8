"""
Setup script for studysnap.

StudySnap turns study material into summaries, quizzes, flashcards and
tutor answers using a language model. It serves two roles:

1. Library - ``StudyContentService`` for applications that need study content
2. Developer CLI - the 'studysnap' command for trying prompts and providers

Generation prefers a local Ollama model when one is available and falls
back to a hosted chat-completions endpoint, then to clearly marked mock
content, so callers always receive a result.
"""

from setuptools import find_packages, setup

setup(
    name="studysnap",
    version="1.0.0",
    description="Resilient study-content generation from local and hosted language models",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="StudySnap",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "httpx>=0.25.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
        "local-ai": [
            "ollama>=0.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "studysnap=studysnap.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning flashcards quiz llm education ollama",
)
