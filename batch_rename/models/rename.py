"""Rename request and result data models."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class RenameRequest(BaseModel):
    """An external rename command paired with the file it should be applied to."""

    model_config = ConfigDict(frozen=True)

    command: tuple[str, ...] = Field(description="Program followed by its arguments; the file name is appended last")
    file: Path = Field(description="File (or directory) to rename, as given by the user")

    @field_validator("command")
    @classmethod
    def _command_not_empty(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("rename command is missing")
        return value

    @property
    def program(self) -> str:
        return self.command[0]

    @property
    def args(self) -> tuple[str, ...]:
        return self.command[1:]

    def __str__(self) -> str:
        return f"RenameRequest({' '.join(self.command)!r} on '{self.file}')"


class SimulationResult(BaseModel):
    """Original path and the path the rename command proposes for it."""

    model_config = ConfigDict(frozen=True)

    source: Path = Field(description="Canonical absolute path of the original file")
    target: Path = Field(description="Absolute path the file would be renamed to")

    @model_validator(mode="after")
    def _same_directory(self) -> "SimulationResult":
        if self.source.parent != self.target.parent:
            raise ValueError(
                f"rename of '{self.source}' proposes '{self.target}' outside of its directory; "
                "only renames within the same directory are supported"
            )
        return self

    @property
    def changed(self) -> bool:
        """Whether the proposed file name differs from the original one."""
        return self.source.name != self.target.name

    def __str__(self) -> str:
        return f"SimulationResult('{self.source.name}' -> '{self.target.name}')"


class Decision(str, Enum):
    """User's answer to a single rename confirmation."""

    ACCEPT = "accept"
    REJECT = "reject"
    QUIT = "quit"

    @classmethod
    def from_key(cls, key: str) -> "Decision | None":
        """Map a single keystroke to a decision, or None if it is not understood."""
        if key in ("", "\r", "\n", "y", "Y"):
            return cls.ACCEPT
        if key in ("n", "N"):
            return cls.REJECT
        if key == "q":
            return cls.QUIT
        return None


@dataclass
class BatchReport:
    """Tracks what happened to the files of one batch run."""

    simulated: int = 0
    unchanged: int = 0
    accepted: int = 0
    rejected: int = 0
    renamed: int = 0
    failed: int = 0
    quit: bool = False

    def summary(self) -> str:
        """Return a human-readable summary of the batch."""
        lines = [
            "Batch Summary:",
            f"  Simulated: {self.simulated}",
            f"  Unchanged: {self.unchanged}",
            f"  Accepted: {self.accepted}",
            f"  Rejected: {self.rejected}",
            f"  Renamed: {self.renamed}",
            f"  Failed: {self.failed}",
        ]
        if self.quit:
            lines.append("  Stopped early at user request.")
        return "\n".join(lines)
