"""Logic for reconciling generated files with what is already on disk."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from vitedoc.run_stats import RunStats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteIntent:
    """One file the current run wants to exist."""

    path: str  # posix path relative to the output root
    content: str
    is_scaffold: bool = False


class IncrementalWriter:
    """Writes only what changed and removes output the model no longer produces.

    Generated files live in the managed directories and are diffed against
    the run's write intents. Scaffold files are written once, when absent, and
    are never deleted or overwritten afterwards.
    """

    def __init__(
        self,
        out_root: str | Path,
        managed_dirs: Iterable[str],
        stats: RunStats | None = None,
    ) -> None:
        """Initialize with the output root and the subtrees this writer owns."""
        self.out_root = Path(out_root)
        if self.out_root.exists() and not self.out_root.is_dir():
            msg = f"Output path is not a directory: {self.out_root}"
            raise SystemExit(msg)
        self.managed_dirs = [d.strip("/") for d in managed_dirs if d.strip("/")]
        self.stats = stats if stats is not None else RunStats()
        self.intents: dict[str, WriteIntent] = {}
        self._finalized = False

    def write(self, rel_path: str, content: str) -> bool:
        """Record and write a generated file; returns False when it was unchanged."""
        self._check_open()
        target = self._resolve(rel_path)
        key = self._key(target)
        if key in self.intents:
            logger.warning(f"Output file written twice in one run: {key}")
        self.intents[key] = WriteIntent(key, content)

        data = content.encode("utf-8")
        if target.is_file() and target.read_bytes() == data:
            self.stats.files_unchanged += 1
            logger.debug(f"Unchanged: {key}")
            return False
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        self.stats.files_written += 1
        return True

    def write_scaffold(self, rel_path: str, content: str) -> bool:
        """Write a protected file only if it does not exist yet."""
        self._check_open()
        target = self._resolve(rel_path)
        key = self._key(target)
        self.intents[key] = WriteIntent(key, content, is_scaffold=True)
        if target.exists():
            return False
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        self.stats.files_written += 1
        return True

    def patch_import_line(self, rel_path: str, line: str) -> bool:
        """Re-insert ``line`` after the last import of an existing file if missing."""
        self._check_open()
        target = self._resolve(rel_path)
        if not target.exists():
            return False
        content = target.read_text(encoding="utf-8")
        lines = content.split("\n")
        if any(existing.strip() == line.strip() for existing in lines):
            return False
        last_import = -1
        for i, existing in enumerate(lines):
            if existing.startswith("import "):
                last_import = i
        lines.insert(last_import + 1, line)
        target.write_text("\n".join(lines), encoding="utf-8")
        logger.info(f"Restored missing line in {self._key(target)}: {line}")
        return True

    def finalize(self) -> None:
        """Declare the write-intent set complete; no more writes are accepted."""
        self._finalized = True

    def delete_stale(self) -> list[str]:
        """Delete managed files that the current run did not produce."""
        if not self._finalized:
            msg = "delete_stale() called before finalize(): the write-intent set is incomplete"
            raise RuntimeError(msg)
        deleted: list[str] = []
        root = self.out_root.resolve()
        for managed in self.managed_dirs:
            base = self._resolve(managed)
            if not base.is_dir():
                continue
            for path in sorted(base.rglob("*")):
                if not path.is_file() or path.is_symlink():
                    continue
                resolved = path.resolve()
                if not resolved.is_relative_to(root):
                    continue
                key = self._key(resolved)
                if key in self.intents:
                    continue
                path.unlink()
                deleted.append(key)
                logger.info(f"Deleted stale file: {key}")
            _remove_empty_dirs(base)
        self.stats.files_deleted += len(deleted)
        return deleted

    def _check_open(self) -> None:
        if self._finalized:
            msg = "Writer is finalized; no further writes are allowed"
            raise RuntimeError(msg)

    def _resolve(self, rel_path: str) -> Path:
        root = self.out_root.resolve()
        target = (root / rel_path).resolve()
        if not target.is_relative_to(root) or target == root:
            msg = f"Refusing to touch a path outside the output root: {rel_path}"
            raise ValueError(msg)
        return target

    def _key(self, target: Path) -> str:
        return target.relative_to(self.out_root.resolve()).as_posix()


def _remove_empty_dirs(base: Path) -> None:
    for path in sorted(base.rglob("*"), key=lambda p: len(p.parts), reverse=True):
        if path.is_dir() and not path.is_symlink() and not any(path.iterdir()):
            path.rmdir()
