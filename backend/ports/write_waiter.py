"""WriteWaiterPort — abstract "await durable write" primitive."""

from abc import ABC, abstractmethod


class WriteWaiterPort(ABC):
    @abstractmethod
    def wait_until_stable(self, path: str) -> bool:
        """Block until the file looks fully written. False if it never settles."""
