"""File upload collaborator interface"""

from abc import ABC, abstractmethod


class BaseUploader(ABC):
    """Stores a binary payload and returns its public URL"""

    @abstractmethod
    async def upload(self, payload: bytes, destination: str) -> str:
        """Upload `payload` under the `destination` hint and return the public URL"""
        pass
