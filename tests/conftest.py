"""Shared pytest fixtures for Treesmith tests."""
import logging
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator, List

import pytest
import yaml

from treesmith.infrastructure.cache_manager import PatternCache, set_global_cache
from treesmith.infrastructure.config_manager import ConfigManager, set_global_config
from treesmith.infrastructure.logger import Logger, LogLevel, set_global_logger


class ListHandler(logging.Handler):
    """Collects formatted log messages in memory."""

    def __init__(self):
        super().__init__()
        self.messages: List[str] = []
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)
        self.messages.append(record.getMessage())


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def source_dir(temp_dir: Path) -> Path:
    """Create a template directory with test files."""
    source = temp_dir / "template"
    source.mkdir()

    (source / "README.md").write_text("# {{name}}\n\nGenerated project")
    (source / "hello.txt").write_text("hello {{name}}")
    (source / "secret.key").write_text("do not copy")

    (source / "src").mkdir()
    (source / "src" / "main.py").write_text("print('{{name}}')\n")
    (source / "src" / "config.yaml.j2").write_text("name: {{ project }}\n")

    # Empty directories must survive the walk
    (source / "empty").mkdir()
    (source / "docs").mkdir()
    (source / "docs" / "drafts").mkdir()

    return source


@pytest.fixture
def dest_dir(temp_dir: Path) -> Path:
    """Destination path (not created)."""
    return temp_dir / "output"


@pytest.fixture
def log_handler() -> ListHandler:
    return ListHandler()


@pytest.fixture
def logger(log_handler: ListHandler) -> Logger:
    """Debug-level logger writing to an in-memory handler."""
    return Logger(name="treesmith.test", level=LogLevel.DEBUG, handlers=[log_handler])


@pytest.fixture
def cache() -> PatternCache:
    """Private pattern cache."""
    return PatternCache()


@pytest.fixture
def sample_config() -> Dict[str, Any]:
    """Provide a sample Treesmith configuration."""
    return {
        "treesmith": {
            "logging": {"level": "DEBUG"},
            "matching": {"style": "strict"},
            "templates": {
                "service": {
                    "includes": ["**"],
                    "excludes": ["secret.key", "regex:\\.bak$"],
                    "variables": [
                        {"placeholder": "{{name}}", "value": "world"},
                        {
                            "placeholder": "{{port}}",
                            "default": 8080,
                            "includes": ["*.yaml"],
                        },
                    ],
                    "render": {"project": "demo"},
                },
            },
        }
    }


@pytest.fixture
def config_file(temp_dir: Path, sample_config: Dict[str, Any]) -> Path:
    """Create a configuration file."""
    config_path = temp_dir / "treesmith.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config, f)
    return config_path


@pytest.fixture(autouse=True)
def reset_singletons():
    """Give every test fresh shared cache, config and logger instances."""
    set_global_cache(None)
    set_global_config(ConfigManager(load_environment=False))
    set_global_logger(Logger(handlers=[logging.NullHandler()]))
    yield
    set_global_cache(None)
    set_global_config(None)
