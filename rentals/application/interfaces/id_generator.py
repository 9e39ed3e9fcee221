"""Interface IdGenerator - Puerto para generación de identificadores de documentos."""

import uuid
from abc import ABC, abstractmethod


class IdGenerator(ABC):
    """
    Puerto para generación de identificadores únicos.

    Permite inyectar implementaciones fake para testing determinista.
    """

    @abstractmethod
    def generate_id(self) -> str:
        """
        Genera un identificador único de documento.

        Returns:
            String único (UUID v4 en la implementación real).
        """
        raise NotImplementedError


class UuidIdGenerator(IdGenerator):
    """Implementación real que genera UUIDs aleatorios."""

    def generate_id(self) -> str:
        return str(uuid.uuid4())


class FakeIdGenerator(IdGenerator):
    """
    Implementación fake para testing.

    Genera valores predecibles: `<prefix>-0001`, `<prefix>-0002`, ...
    """

    def __init__(self, prefix: str = "test"):
        self._prefix = prefix
        self._counter = 0

    def generate_id(self) -> str:
        self._counter += 1
        return f"{self._prefix}-{self._counter:04d}"
