"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass, field


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class ExpressionError(PackageError):
    """Raised internally when an expression cannot be parsed or evaluated.

    The public evaluation entry points convert it into a failure outcome; it
    never crosses the `evaluate` boundary.
    """

    message: str
    position: int | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        if self.position is None:
            return self.message
        return f"{self.message} (at position {self.position})"


@dataclass
class SpecLoadError(PackageError):
    """Raised when an external form specification is rejected."""

    message: str
    problems: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        """Return error message payload."""
        if not self.problems:
            return self.message
        return f"{self.message}: " + "; ".join(self.problems)
