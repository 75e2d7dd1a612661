"""
Configuration management for the LearnNova quiz engine.

This module centralizes all configuration settings following 12-factor app principles:
- Settings loaded from environment variables (and an optional .env file)
- Sensible defaults for development
- Type hints for IDE support
- Single source of truth for quiz limits, paths and logging
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back to ``default``."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    """Read a float environment variable, falling back to ``default``."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass
class QuizConfig:
    """Quiz session limits and defaults."""

    # Hard ceiling on selectable questions per session
    max_questions: int = field(default_factory=lambda: _env_int("QUIZ_MAX_QUESTIONS", 50))

    # Tab-switch violations before the learner is warned
    warn_threshold: int = field(default_factory=lambda: _env_int("QUIZ_WARN_THRESHOLD", 3))

    # Exam time budget, in minutes per 10 questions
    default_time_budget: int = 30
    time_budget_presets: tuple = (15, 30, 45, 60, 90, 120)

    # Question count selection
    default_question_count: int = 10
    count_presets: tuple = (5, 10, 15, 20, 25, 30)

    # Timer resolution
    tick_interval_seconds: float = field(
        default_factory=lambda: _env_float("QUIZ_TICK_INTERVAL", 1.0)
    )

    # Question formats enabled when the learner does not choose any
    default_allowed_types: tuple = ("multiple_choice", "fill_blank", "true_false")


@dataclass
class PathConfig:
    """File system paths - single source of truth for all directories."""

    project_root: Path = field(default_factory=lambda: Path(__file__).parent.parent)
    data_dir: Path = field(
        default_factory=lambda: Path(
            os.getenv("LEARNNOVA_DATA_DIR", str(Path(__file__).parent.parent / "data"))
        ).resolve()
    )

    # Computed from data_dir
    results_dir: Path = field(init=False)
    users_dir: Path = field(init=False)
    exports_dir: Path = field(init=False)

    # JSON schemas ship inside the package
    schemas_dir: Path = field(init=False)
    question_schema: Path = field(init=False)
    result_schema: Path = field(init=False)

    def __post_init__(self):
        """Initialize computed paths."""
        self.results_dir = self.data_dir / "quiz_results"
        self.users_dir = self.data_dir / "users"
        self.exports_dir = self.data_dir / "exports"
        self.schemas_dir = Path(__file__).parent / "schemas"
        self.question_schema = self.schemas_dir / "question.schema.json"
        self.result_schema = self.schemas_dir / "quiz_result.schema.json"

    def prepare_filesystem(self):
        """
        Create data directories if they don't exist.

        Separated from __post_init__ to avoid side-effects on import.
        Call this explicitly from your app entrypoint.
        """
        for directory in [
            self.data_dir,
            self.results_dir,
            self.users_dir,
            self.exports_dir,
        ]:
            directory.mkdir(parents=True, exist_ok=True)


@dataclass
class LoggingConfig:
    """Logging configuration."""

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Config:
    """
    Main configuration class. Singleton pattern.

    Usage:
        from learnnova.config import config

        # Access settings
        ceiling = config.quiz.max_questions
        results = config.paths.results_dir

        # Prepare filesystem (call once at startup)
        config.prepare_fs()
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.quiz = QuizConfig()
            cls._instance.paths = PathConfig()
            cls._instance.logging = LoggingConfig()
        return cls._instance

    def prepare_fs(self):
        """Prepare filesystem (create directories). Call once at startup."""
        self.paths.prepare_filesystem()

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if self.quiz.max_questions < 1:
            errors.append(f"max_questions must be >= 1, got {self.quiz.max_questions}")

        if self.quiz.warn_threshold < 1:
            errors.append(f"warn_threshold must be >= 1, got {self.quiz.warn_threshold}")

        if self.quiz.default_time_budget <= 0:
            errors.append(
                f"default_time_budget must be > 0, got {self.quiz.default_time_budget}"
            )

        if self.quiz.tick_interval_seconds <= 0:
            errors.append(
                f"tick_interval_seconds must be > 0, got {self.quiz.tick_interval_seconds}"
            )

        if not isinstance(logging.getLevelName(self.logging.log_level.upper()), int):
            errors.append(f"Unknown log_level: {self.logging.log_level}")

        for schema in (self.paths.question_schema, self.paths.result_schema):
            if not schema.exists():
                errors.append(f"Schema not found: {schema}")

        return errors


# Global config instance
config = Config()


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the ``learnnova`` logger hierarchy from config.

    Args:
        level: Override for ``config.logging.log_level``

    Returns:
        The package root logger
    """
    name = (level or config.logging.log_level).upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        numeric = logging.INFO

    logger = logging.getLogger("learnnova")
    logger.setLevel(numeric)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(config.logging.log_format))
        logger.addHandler(handler)
    return logger
