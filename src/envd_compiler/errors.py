"""Typed compiler errors with stable, machine-readable codes."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Mapping, Optional


class ErrorCode(str, Enum):
    """Stable error identifiers."""

    CONFIG = "E_CONFIG"
    IO = "E_IO"
    OWNERSHIP = "E_OWNERSHIP"


class CompileError(Exception):
    """Base error carrying a code, the failing stage, an optional hint and context."""

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        stage: Optional[str] = None,
        hint: Optional[str] = None,
        context: Optional[Mapping[str, str]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code.value
        self.stage = stage
        self.hint = hint
        self.context: Dict[str, str] = dict(context or {})

    def __str__(self) -> str:
        head = f"[{self.stage}] {self.message}" if self.stage else self.message
        parts = [head]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        for key, value in self.context.items():
            if value:
                parts.append(f"  {key}: {value}")
        return "\n".join(parts)

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "code": self.code,
            "message": self.message,
            "stage": self.stage,
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ConfigError(CompileError):
    """Unsupported language, OS or accelerator combination."""

    def __init__(
        self,
        message: str,
        *,
        stage: Optional[str] = None,
        hint: Optional[str] = None,
        context: Optional[Mapping[str, str]] = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.CONFIG, stage=stage, hint=hint, context=context)


class CredentialError(CompileError):
    """The local public key could not be read."""

    def __init__(
        self,
        message: str,
        *,
        stage: Optional[str] = None,
        hint: Optional[str] = None,
        context: Optional[Mapping[str, str]] = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.IO, stage=stage, hint=hint, context=context)


class OwnershipError(CompileError):
    """An attempt to change uid/gid after user provisioning resolved them."""

    def __init__(
        self,
        message: str,
        *,
        stage: Optional[str] = None,
        hint: Optional[str] = None,
        context: Optional[Mapping[str, str]] = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.OWNERSHIP, stage=stage, hint=hint, context=context)


__all__ = [
    "CompileError",
    "ConfigError",
    "CredentialError",
    "ErrorCode",
    "OwnershipError",
]
