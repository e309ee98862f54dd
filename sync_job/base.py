"""
Abstract collaborators of the sync job: checkpoint store, record fetcher and
record sink.
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional


class CheckpointStore(ABC):
    """Durable key-value store holding scalar checkpoint items."""
    
    @abstractmethod
    async def get(self, checkpoint_id: str) -> Optional[Dict[str, Any]]:
        """
        Read a checkpoint item.
        
        Returns:
            ``{"timestamp": <int>}`` or None when no item exists
        """
        pass
    
    @abstractmethod
    async def put(self, checkpoint_id: str, item: Dict[str, Any]) -> None:
        """Write a checkpoint item, replacing any existing one"""
        pass


class RecordFetcher(ABC):
    """Read-only upstream source of records."""
    
    @abstractmethod
    async def fetch(self, start: int, end: int) -> List[Dict[str, Any]]:
        """
        Fetch records whose creation time falls in ``[start, end]``.
        
        Args:
            start: Inclusive lower bound, milliseconds since epoch
            end: Inclusive upper bound, milliseconds since epoch
            
        Returns:
            List of raw record dictionaries
        """
        pass


class RecordSink(ABC):
    """Durable store accepting individual record writes."""
    
    @abstractmethod
    async def put(self, key: int, record: Dict[str, Any]) -> None:
        """Write one record under ``key``; raises on failure"""
        pass
