from abc import ABC, abstractmethod
from typing import List


class ChunkSplitter(ABC):
    @abstractmethod
    def split(self, file_path: str) -> List[str]:
        """
        Split a downloaded media file into transport-sized pieces.

        Returns the ordered chunk paths; at least one entry (the original
        path when no split is needed).
        """
        pass
