"""
Factory that applies one settings object to every vector it builds.

Strict validation is a property of the factory, not of the process: tests and
request handlers that need different behaviour build different factories
instead of flipping shared state.

Examples:
    >>> factory = CorrelationVectorFactory()
    >>> vector = factory.start(request.headers.get("MS-CV")).unwrap()
    >>> outbound = vector.increment()

    >>> strict = factory.with_validation(True)
    >>> strict.extend("").is_err()
    True

Tags:
    correlation-vector, factory, configuration

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from cvector.format import Version
from cvector.logging import get_logger
from cvector.result import Result
from cvector.settings import CorrelationVectorSettings
from cvector.spin import SpinParameters
from cvector.vector import CorrelationVector


logger = get_logger(__name__)


class CorrelationVectorFactory:
    """Builds correlation vectors with a fixed configuration."""

    def __init__(self, settings: CorrelationVectorSettings | None = None):
        self._settings = settings or CorrelationVectorSettings()
        self._spin_parameters = self._settings.spin_parameters()

    @property
    def settings(self) -> CorrelationVectorSettings:
        return self._settings

    @property
    def validate(self) -> bool:
        return self._settings.validate_during_creation

    def with_validation(self, enabled: bool) -> CorrelationVectorFactory:
        """Return a factory identical to this one except for strict validation."""
        return CorrelationVectorFactory(
            self._settings.model_copy(update={"validate_during_creation": enabled})
        )

    def create(self, version: Version | None = None) -> Result[CorrelationVector]:
        return CorrelationVector.create(version or self._settings.default_version)

    def extend(self, correlation_vector: str) -> Result[CorrelationVector]:
        return CorrelationVector.extend(correlation_vector, validate=self.validate)

    def parse(self, correlation_vector: str) -> Result[CorrelationVector]:
        return CorrelationVector.parse(correlation_vector)

    def spin(
        self, correlation_vector: str, parameters: SpinParameters | None = None
    ) -> Result[CorrelationVector]:
        return CorrelationVector.spin(
            correlation_vector, parameters or self._spin_parameters, validate=self.validate
        )

    def start(self, incoming: str | None = None) -> Result[CorrelationVector]:
        """Vector for a new operation: extend ``incoming`` or create a fresh one."""
        if not incoming:
            logger.debug("cv_created", version=int(self._settings.default_version))
            return self.create()
        return self.extend(incoming)

    def __repr__(self) -> str:
        return (
            f"CorrelationVectorFactory(validate={self.validate}, "
            f"default_version={self._settings.default_version.name})"
        )


__all__ = ["CorrelationVectorFactory"]
