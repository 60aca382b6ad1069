from typing import List

from mediagrab.core.interfaces import ChunkSplitter


class PassthroughChunkSplitter(ChunkSplitter):
    """Default splitter: the whole file is a single chunk."""

    def split(self, file_path: str) -> List[str]:
        return [file_path]
