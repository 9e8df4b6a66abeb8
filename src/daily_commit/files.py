"""
File-rewrite collaborator.

Reads the previous content (if any), writes the new content and reports
both. Blocking file I/O runs in a worker thread.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path

import structlog

from daily_commit.errors import FileRewriteError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FileRewriteResult:
    """Outcome of a successful rewrite."""

    success: bool
    message: str
    file_path: str
    old_content: str
    new_content: str


def _rewrite(path: Path, new_content: str) -> FileRewriteResult:
    old_content = ""
    try:
        old_content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.info("File does not exist, will create it", file_path=str(path))

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(new_content, encoding="utf-8")

    return FileRewriteResult(
        success=True,
        message=f"File {path.name} modified successfully",
        file_path=str(path),
        old_content=old_content,
        new_content=new_content,
    )


async def rewrite_text_file(path: Path, new_content: str) -> FileRewriteResult:
    """
    Replace the content of a text file, creating it and its parents if needed.

    Raises:
        FileRewriteError: On any OS or decoding error
    """
    try:
        result = await asyncio.to_thread(_rewrite, Path(path), new_content)
    except (OSError, UnicodeError) as exc:
        raise FileRewriteError(
            f"Failed to modify file {path}",
            {"file_path": str(path), "error_type": type(exc).__name__},
        ) from exc

    logger.info("File modified", file_path=result.file_path)
    return result
