# File: modelbake/exporters.py
"""
modelbake - File Exporter
==========================

Writes rendered files under the output directory:

    1. Each file is written atomically (temp file in the same directory,
       then ``os.replace``).
    2. Existing files are left untouched unless ``force`` is set; they are
       reported as skipped.
    3. Dry-run renders the manifest of what *would* be written and touches
       nothing on disk.

A failed write is recorded and the remaining files are still attempted;
files already written stay in place.

Complexity: O(F) where F = number of output files.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterable, List, Mapping, Tuple

from modelbake.utils import Timer, count_lines, sha256_hex

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelbake.exporters")


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    sha256: str


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Final result returned by ``ProjectExporter.export()``."""

    written: Tuple[FileRecord, ...] = ()
    skipped: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()
    dry_run: bool = False
    elapsed_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def total_bytes(self) -> int:
        return sum(r.size_bytes for r in self.written)

    @property
    def total_lines(self) -> int:
        return sum(r.line_count for r in self.written)


# ---------------------------------------------------------------------------
# ProjectExporter class
# ---------------------------------------------------------------------------


class ProjectExporter:
    """
    Writes generated files below ``output_dir``.

    Usage::

        exporter = ProjectExporter(Path("./app"), force=False)
        result = exporter.export({"models/post.py": source})

    Thread-safety: NOT thread-safe.  Use one exporter per output directory.
    """

    def __init__(
        self,
        output_dir: Path,
        *,
        force: bool = False,
        dry_run: bool = False,
    ) -> None:
        self._output_dir: Path = Path(output_dir).resolve()
        self._force: bool = force
        self._dry_run: bool = dry_run

        logger.debug(
            "ProjectExporter initialised: output_dir=%s, force=%s, dry_run=%s.",
            self._output_dir,
            force,
            dry_run,
        )

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def export(
        self,
        files: Mapping[str, str],
        *,
        keep_existing: Iterable[str] = (),
    ) -> ExportResult:
        """
        Write every ``relative_path -> content`` entry of *files*.

        Args:
            files: Rendered files keyed by path relative to the output
                directory.
            keep_existing: Support files that are written only when
                missing, even with ``force``, and never reported as
                skipped.

        Returns:
            ExportResult listing written records, skipped paths and errors.
        """
        keep: FrozenSet[str] = frozenset(keep_existing)
        written: List[FileRecord] = []
        skipped: List[str] = []
        errors: List[str] = []

        with Timer("export") as timer:
            for rel_path, content in files.items():
                full_path: Path = self._output_dir / rel_path

                if full_path.exists():
                    if rel_path in keep:
                        logger.debug("Keeping existing support file %s.", rel_path)
                        continue
                    if not self._force:
                        logger.warning(
                            "File %s exists; not overwriting (use --force).", full_path
                        )
                        skipped.append(rel_path)
                        continue

                if self._dry_run:
                    logger.info("Dry run: would write %s.", full_path)
                    written.append(self._record(full_path, content, rel_path))
                    continue

                try:
                    written.append(self._write_single_file(full_path, content, rel_path))
                except OSError as exc:
                    error_msg: str = f"Failed to write {rel_path}: {type(exc).__name__}: {exc}"
                    errors.append(error_msg)
                    logger.error(error_msg)

        result: ExportResult = ExportResult(
            written=tuple(written),
            skipped=tuple(skipped),
            errors=tuple(errors),
            dry_run=self._dry_run,
            elapsed_seconds=timer.elapsed,
        )

        if result.success:
            logger.info(
                "Export completed: %d written, %d skipped, %d bytes, %.3fs.",
                len(result.written),
                len(result.skipped),
                result.total_bytes,
                timer.elapsed,
            )
        else:
            logger.error(
                "Export completed with %d error(s) in %.3fs.",
                len(result.errors),
                timer.elapsed,
            )
        return result

    # -----------------------------------------------------------------
    # Internal: file writing
    # -----------------------------------------------------------------

    @staticmethod
    def _record(full_path: Path, content: str, rel_path: str) -> FileRecord:
        return FileRecord(
            relative_path=rel_path,
            absolute_path=str(full_path),
            size_bytes=len(content.encode("utf-8")),
            line_count=count_lines(content),
            sha256=sha256_hex(content),
        )

    def _write_single_file(self, full_path: Path, content: str, rel_path: str) -> FileRecord:
        """Write one file atomically and return its record."""
        full_path.parent.mkdir(parents=True, exist_ok=True)
        self._atomic_write(full_path, content.encode("utf-8"))

        record: FileRecord = self._record(full_path, content, rel_path)
        logger.info("Wrote %s (%d bytes, %d lines).", rel_path, record.size_bytes, record.line_count)
        return record

    @staticmethod
    def _atomic_write(target_path: Path, data: bytes) -> None:
        """
        Write data to target_path atomically using a temporary file.

        The temp file lives in the target directory so ``os.replace`` never
        crosses a filesystem boundary.  On failure the temp file is removed
        and the error propagates.
        """
        fd, tmp_path = tempfile.mkstemp(
            dir=str(target_path.parent),
            prefix=f".{target_path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, str(target_path))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ProjectExporter",
    "ExportResult",
    "FileRecord",
]

logger.debug("modelbake.exporters loaded.")
