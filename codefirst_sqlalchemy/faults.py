"""
CodeFirst Faults - Core types and fault taxonomy.

Defines:
- Fault base class (structured fault objects)
- FaultDomain (explicit fault domains)
- Severity levels
- Domain faults raised by the renderer, parser, generator and config layer

Database errors are NOT faults: anything raised by SQLAlchemy while
executing DDL reaches the caller unmodified.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


# ============================================================================
# Severity & Domain
# ============================================================================

class Severity(str, Enum):
    """
    Fault severity levels.

    Determines the logging level used when a fault is reported.
    """
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


class FaultDomain:
    """
    Fault domains (taxonomy).

    Identifies the functional area where a fault occurred.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.value = name
        self.description = description

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"FaultDomain(name='{self.name}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FaultDomain):
            return self.name == other.name
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(self.name)


# Standard Domains
FaultDomain.SCHEMA = FaultDomain("schema", "Malformed attribute or index schema")
FaultDomain.GENERATOR = FaultDomain("generator", "Code generation errors")
FaultDomain.CONFIG = FaultDomain("config", "Configuration errors")
FaultDomain.ADAPTER = FaultDomain("adapter", "Adapter composition errors")


DOMAIN_DEFAULTS = {
    FaultDomain.SCHEMA: Severity.ERROR,
    FaultDomain.GENERATOR: Severity.ERROR,
    FaultDomain.CONFIG: Severity.FATAL,
    FaultDomain.ADAPTER: Severity.FATAL,
}


# ============================================================================
# Fault - Base Class
# ============================================================================

class Fault(Exception):
    """
    Base fault class - structured, typed fault object.

    Attributes:
        code: Stable machine-readable identifier (e.g., "SCHEMA_CONTRACT")
        message: Human-readable summary
        domain: Fault domain
        severity: Fault severity
        metadata: Additional context data

    Example:
        ```python
        raise Fault(
            code="TYPE_MISSING",
            message="Attribute 'email' has no type",
            domain=FaultDomain.SCHEMA,
        )
        ```
    """

    def __init__(
        self,
        code: str | None = None,
        message: str | None = None,
        *,
        domain: FaultDomain | None = None,
        severity: Optional[Severity] = None,
        metadata: Optional[dict[str, Any]] = None,
    ):
        self.code = code if code is not None else getattr(self, "code", None)
        self.message = message if message is not None else getattr(self, "message", None)
        self.domain = domain if domain is not None else getattr(self, "domain", None)

        if self.code is None or self.message is None or self.domain is None:
            raise TypeError(f"{self.__class__.__name__} missing required code, message, or domain")

        super().__init__(self.message)

        self.severity = severity or DOMAIN_DEFAULTS.get(self.domain, Severity.ERROR)
        self.metadata = metadata or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(code={self.code!r}, domain={self.domain.value}, "
            f"severity={self.severity.value})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize fault for CLI/JSON output."""
        return {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.name,
            "severity": self.severity.value,
            "metadata": self.metadata,
        }


# ============================================================================
# SCHEMA Faults
# ============================================================================

class SchemaContractFault(Fault, TypeError):
    """
    Attribute or index schema violates the renderer's input contract.

    Also a ``TypeError`` so callers treating malformed input as a type
    error catch it without importing the fault taxonomy.
    """

    def __init__(self, subject: str, reason: str, **kwargs):
        super().__init__(
            code="SCHEMA_CONTRACT",
            message=f"Invalid schema for {subject}: {reason}",
            domain=FaultDomain.SCHEMA,
            metadata={"subject": subject, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# GENERATOR Faults
# ============================================================================

class AttributeParseFault(Fault, ValueError):
    """A ``name[:type][:index]`` token could not be parsed."""

    def __init__(self, token: str, reason: str, **kwargs):
        super().__init__(
            code="ATTRIBUTE_PARSE",
            message=f"Cannot parse attribute {token!r}: {reason}",
            domain=FaultDomain.GENERATOR,
            metadata={"token": token, "reason": reason, **kwargs.get("metadata", {})},
        )


class GeneratorConflictFault(Fault):
    """A generated artifact would overwrite an existing file."""

    def __init__(self, path: str, reason: str = "already exists", **kwargs):
        super().__init__(
            code="GENERATOR_CONFLICT",
            message=f"Refusing to write '{path}': {reason} (use --force to overwrite)",
            domain=FaultDomain.GENERATOR,
            metadata={"path": path, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# CONFIG / ADAPTER Faults
# ============================================================================

class ConfigInvalidFault(Fault):
    """Configuration value has the wrong type or cannot be loaded."""

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Invalid config '{key}': {reason}",
            domain=FaultDomain.CONFIG,
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )


class AdapterConfigurationFault(Fault):
    """Adapter operation requires a collaborator that was not injected."""

    def __init__(self, operation: str, missing: str, **kwargs):
        super().__init__(
            code="ADAPTER_NOT_CONFIGURED",
            message=f"Cannot {operation}: no {missing} was provided to the adapter",
            domain=FaultDomain.ADAPTER,
            metadata={"operation": operation, "missing": missing, **kwargs.get("metadata", {})},
        )


class ModelLookupFault(Fault):
    """A ``module:Class`` reference does not resolve to a Model subclass."""

    def __init__(self, target: str, reason: str, **kwargs):
        super().__init__(
            code="MODEL_LOOKUP",
            message=f"Cannot load model '{target}': {reason}",
            domain=FaultDomain.ADAPTER,
            metadata={"target": target, "reason": reason, **kwargs.get("metadata", {})},
        )


__all__ = [
    "Severity",
    "FaultDomain",
    "Fault",
    "SchemaContractFault",
    "AttributeParseFault",
    "GeneratorConflictFault",
    "ConfigInvalidFault",
    "AdapterConfigurationFault",
    "ModelLookupFault",
]
