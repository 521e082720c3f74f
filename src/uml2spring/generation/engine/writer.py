"""File writer for generated Java sources."""

import time
from pathlib import Path
from typing import Iterable, List
from uml2spring.config.logging import get_logger
from .pipeline import Artifact

logger = get_logger(__name__)


def java_source_root(out_dir: Path, base_package: str) -> Path:
    """Directory holding the base package under a Maven-style layout."""
    return Path(out_dir) / "src" / "main" / "java" / Path(*base_package.split("."))


def write_artifacts(artifacts: Iterable[Artifact], out_dir: Path) -> List[Path]:
    """
    Write artifacts below out_dir, creating group directories as needed.

    Args:
        artifacts: Generated artifacts
        out_dir: Directory the relative paths are resolved against

    Returns:
        Paths of the written files, in artifact order
    """
    write_start = time.time()
    out_dir = Path(out_dir)
    written: List[Path] = []

    for artifact in artifacts:
        path = out_dir / artifact.relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            path.write_text(artifact.content, encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise
        written.append(path)
        logger.debug(f"Wrote {artifact.kind} artifact {path} ({len(artifact.content)} chars)")

    logger.info(f"Wrote {len(written)} files to {out_dir} in {time.time() - write_start:.3f}s")
    return written
