from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from voxforge.application.synthesis_pipeline import AudioArtifact


class ArtifactWriter:
    def __init__(self, *, out_dir: Path, stem: str = "voxforge"):
        self.out_dir = out_dir
        self.stem = stem

    def filename_for(self, artifact: AudioArtifact) -> str:
        if artifact.chunk_index is None:
            return f"{self.stem}.wav"
        return f"{self.stem}_chunk_{artifact.chunk_index + 1:03d}.wav"

    def write(self, artifacts: Iterable[AudioArtifact]) -> list[Path]:
        self.out_dir.mkdir(parents=True, exist_ok=True)

        paths: list[Path] = []
        for artifact in artifacts:
            path = self.out_dir / self.filename_for(artifact)
            path.write_bytes(artifact.wav_bytes)
            paths.append(path)
        return paths
