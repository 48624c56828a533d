"""Pytest configuration.

This repo follows the `src/` layout. Some environments may invoke a `pytest`
entrypoint from a different Python install than the one used for
`python -m pip install -e ...`, which can cause `import pet4bnd` to fail.

To keep the suite robust, we ensure `src/` is on `sys.path` during tests.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator, Optional

import pytest
import structlog


def pytest_configure() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    src_dir = repo_root / "src"
    sys.path.insert(0, str(src_dir))


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    # The CLI configures structlog against the runner's (temporary) stderr.
    yield
    structlog.reset_defaults()


# =============================================================================
# Shared Test Helpers
# =============================================================================


class RecordingFeedback:
    """Feedback sink collecting messages for assertions."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.infos: list[str] = []
        self.exceptions: list[BaseException] = []

    def fail(self, message: str, error: Optional[BaseException] = None) -> None:
        self.errors.append(message)
        if error is not None:
            self.exceptions.append(error)

    def warn(self, message: str, error: Optional[BaseException] = None) -> None:
        self.warnings.append(message)
        if error is not None:
            self.exceptions.append(error)

    def info(self, message: str) -> None:
        self.infos.append(message)


def sample_pet_text() -> str:
    # Covers comments, blank lines, groups, inheritance, attributes and odd spacing.
    return "\n".join(
        [
            "# Package exports of the demo bundle",
            "",
            "$bundle-version: 1.0.0 < 2.0.0",
            "",
            "$core: 1.5.0",
            "",
            "org.example.api: 1.0.0 @ minor  # public API",
            "+ uses:=\"org.example.spi\"",
            "org.example.spi:   2.1.3   <  3.0.0",
            "org.example.core: $core",
            "org.example.util: inherit",
            "",
        ]
    ) + "\n"


def write_source(tmp_path: Path, text: str, name: str = "exports.pet") -> Path:
    path = tmp_path / name
    path.write_bytes(text.encode("utf-8"))
    return path
