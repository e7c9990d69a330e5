"""Structured error hierarchy for thread orchestration."""

from __future__ import annotations


class NChainError(Exception):
    def __init__(self, code: str, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.cause = cause


class AdapterNotFoundError(NChainError):
    def __init__(self, adapter: str) -> None:
        super().__init__("ADAPTER_NOT_FOUND", f"Unknown adapter type: {adapter}")
        self.adapter = adapter


class NoPriorStepError(NChainError):
    def __init__(self) -> None:
        super().__init__("NO_PRIOR_STEP", "No previous prompt or hook to retry")


class EmptyResultError(NChainError):
    def __init__(self) -> None:
        super().__init__(
            "EMPTY_RESULT", "Thread processing failed - thread has no final result."
        )


class SchemaParseError(NChainError, ValueError):
    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__("SCHEMA_PARSE", message, cause)


class ArtifactNotFoundError(NChainError, KeyError):
    def __init__(self, key: str) -> None:
        super().__init__("ARTIFACT_NOT_FOUND", f'Artifact "{key}" does not exist')
        self.key = key

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class UnknownModelError(NChainError, ValueError):
    def __init__(self, adapter: str, model: str) -> None:
        super().__init__("UNKNOWN_MODEL", f'{adapter} has no model alias "{model}"')
        self.adapter = adapter
        self.model = model


class AdapterHTTPError(NChainError):
    def __init__(self, adapter: str, status_code: int, message: str) -> None:
        super().__init__("ADAPTER_HTTP", f"{adapter} request failed ({status_code}): {message}")
        self.adapter = adapter
        self.status_code = status_code
