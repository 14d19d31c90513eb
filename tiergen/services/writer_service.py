"""
Artifact writer.
Writes a generated artifact set below an output root, overwriting existing files.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from tiergen.core.exceptions import OutputWriteError
from tiergen.schemas.artifact import Artifact

logger = logging.getLogger(__name__)


class WriterService:

    def resolve(self, root: Path, artifact: Artifact) -> Path:
        """Target path of an artifact; refuses paths that would leave the root."""
        relative = PurePosixPath(artifact.path)
        if relative.is_absolute() or ".." in relative.parts or not relative.parts:
            raise OutputWriteError(f"Refusing to write outside the output folder: {artifact.path}")
        return root.joinpath(*relative.parts)

    def write_artifacts(self, root: Path | str, artifacts: Iterable[Artifact]) -> list[Path]:
        root = Path(root).expanduser().resolve()
        artifacts = list(artifacts)
        targets = [(self.resolve(root, artifact), artifact) for artifact in artifacts]

        written: list[Path] = []
        try:
            root.mkdir(parents=True, exist_ok=True)
            for target, artifact in targets:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(artifact.content, encoding="utf-8")
                written.append(target)
        except OSError as exc:
            logger.error("Failed writing generated output under %s: %s", root, exc)
            raise OutputWriteError(f"Could not write generated output: {exc}") from exc

        logger.info("Wrote %d files under %s", len(written), root)
        return written


writer_service = WriterService()
