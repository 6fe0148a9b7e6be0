"""
Requirement accumulation and reporting models.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field

from .util import version_gt, version_key


class RequirementKind(str, Enum):
    """How strongly a module is needed."""

    REQUIRES = "requires"
    RECOMMENDS = "recommends"
    SUGGESTS = "suggests"
    NOES = "noes"


class Requirements:
    """
    Map of module name to minimum version.

    Adding a module that is already present keeps the higher of the two
    versions; ``"0"`` means "any version".
    """

    def __init__(self, versions: Optional[dict[str, str]] = None):
        self._versions: dict[str, str] = {}
        for name, version in (versions or {}).items():
            self.add(name, version)

    def add(self, name: str, version: object = 0) -> None:
        version = "0" if version in (None, "", 0) else str(version)
        current = self._versions.get(name)
        if current is None or version_gt(version, current):
            self._versions[name] = version

    def update(self, other: "Requirements | dict[str, str]") -> None:
        items = other.as_dict() if isinstance(other, Requirements) else other
        for name, version in items.items():
            self.add(name, version)

    def get(self, name: str) -> Optional[str]:
        return self._versions.get(name)

    def satisfies(self, name: str, version: str) -> bool:
        """True if the recorded requirement for ``name`` covers ``version``."""
        current = self._versions.get(name)
        if current is None:
            return False
        return not version_gt(version, current)

    def remove(self, name: str) -> None:
        self._versions.pop(name, None)

    def as_dict(self) -> dict[str, str]:
        return dict(sorted(self._versions.items()))

    def __contains__(self, name: object) -> bool:
        return name in self._versions

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._versions))

    def __len__(self) -> int:
        return len(self._versions)

    def __repr__(self) -> str:
        return f"Requirements({self.as_dict()!r})"


class Requirement(BaseModel):
    """A single reported requirement."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str = "0"
    kind: RequirementKind = RequirementKind.REQUIRES

    @property
    def is_versioned(self) -> bool:
        return version_key(self.version) not in (None, (0,))


class ScanReport(BaseModel):
    """Outcome of scanning one file or string."""

    model_config = ConfigDict(use_enum_values=True)

    file: Optional[str] = None
    requires: dict[str, str] = Field(default_factory=dict)
    recommends: dict[str, str] = Field(default_factory=dict)
    suggests: dict[str, str] = Field(default_factory=dict)
    noes: dict[str, str] = Field(default_factory=dict)
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    perl6: bool = False

    def requirements(self) -> list[Requirement]:
        """Flat list of every reported requirement."""
        found = []
        for kind in RequirementKind:
            for name, version in getattr(self, kind.value).items():
                found.append(Requirement(name=name, version=version, kind=kind))
        return found

    @classmethod
    def merge(cls, reports: Iterable["ScanReport"]) -> "ScanReport":
        """Combine several reports, keeping the highest version per module."""
        merged = {kind: Requirements() for kind in RequirementKind}
        errors: list[str] = []
        warnings: list[str] = []
        perl6 = False
        for report in reports:
            for kind in RequirementKind:
                merged[kind].update(getattr(report, kind.value))
            prefix = f"{report.file}: " if report.file else ""
            errors.extend(prefix + error for error in report.errors)
            warnings.extend(prefix + warning for warning in report.warnings)
            perl6 = perl6 or report.perl6
        return dedupe(
            cls(
                **{kind.value: merged[kind].as_dict() for kind in RequirementKind},
                errors=errors,
                warnings=warnings,
                perl6=perl6,
            )
        )


def dedupe(report: ScanReport) -> ScanReport:
    """Drop weaker requirements already covered by a stronger kind."""
    requires = Requirements(report.requires)
    recommends = {
        name: version
        for name, version in report.recommends.items()
        if not requires.satisfies(name, version)
    }
    stronger = Requirements(report.requires)
    stronger.update(recommends)
    suggests = {
        name: version
        for name, version in report.suggests.items()
        if not stronger.satisfies(name, version)
    }
    return report.model_copy(update={"recommends": recommends, "suggests": suggests})
