"""Abstract interface for key-value persistence."""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Abstract base class for single-scope key-value backends."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """
        Retrieves a value.

        Args:
            key: The key to read.

        Returns:
            The stored value or None if not found.

        Raises:
            KeyValueStoreError: If the store cannot be read.
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Stores a value, replacing any previous one.

        Raises:
            KeyValueStoreError: If the store cannot be written.
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """
        Removes a key. Removing a missing key is not an error.

        Raises:
            KeyValueStoreError: If the store cannot be written.
        """
        pass
