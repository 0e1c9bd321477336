"""Structured logging and console reporting helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, TextIO

Level = Literal["debug", "info", "warning", "error"]

_PREFIXES: dict[str, str] = {"info": "*", "warning": "*", "error": "*"}


@dataclass(slots=True)
class StructuredLogger:
    records: list[dict[str, Any]] = field(default_factory=list)
    stream: TextIO | None = None
    verbose: bool = False

    def log(
        self,
        *,
        operation: str,
        message: str,
        package: str | None = None,
        level: Level = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = {
            "level": level,
            "operation": operation,
            "package": package,
            "message": message,
        }
        if extra is not None:
            record["extra"] = extra
        self.records.append(record)
        self._echo(level, message)

    def debug(self, operation: str, message: str, **kwargs: Any) -> None:
        self.log(operation=operation, message=message, level="debug", **kwargs)

    def info(self, operation: str, message: str, **kwargs: Any) -> None:
        self.log(operation=operation, message=message, level="info", **kwargs)

    def warning(self, operation: str, message: str, **kwargs: Any) -> None:
        self.log(operation=operation, message=message, level="warning", **kwargs)

    def error(self, operation: str, message: str, **kwargs: Any) -> None:
        self.log(operation=operation, message=message, level="error", **kwargs)

    def records_for_package(self, package: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("package") == package]

    def records_for_operation(self, operation: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("operation") == operation]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record, sort_keys=True) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path

    def _echo(self, level: Level, message: str) -> None:
        if self.stream is None:
            return
        if level == "debug":
            if self.verbose:
                print(message, file=self.stream)
            return
        print(f"{_PREFIXES[level]} {message}", file=self.stream)

