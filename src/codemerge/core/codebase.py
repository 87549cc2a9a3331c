"""Read-only view of a source tree taking part in a merge."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from pydantic import BaseModel, field_validator


class Codebase(BaseModel):
    """A rooted snapshot of a source tree in a given project space.

    Attributes:
        path: Absolute path of the tree's root directory.
        project_space: Logical coordinate system the tree's files live in
            (e.g. ``"internal"`` or ``"public"``).
        description: Free-form label used in log and report output.
    """

    path: Path
    project_space: str = "public"
    description: str = ""

    model_config = {"frozen": True}

    @field_validator("path")
    @classmethod
    def _absolute(cls, value: Path) -> Path:
        return value.expanduser().absolute()

    def resolve(self, relative_name: str) -> Path:
        """Return the absolute path of *relative_name* inside this tree.

        Args:
            relative_name: Forward-slash separated name relative to the root.

        Raises:
            ValueError: If the name is empty or absolute.
        """
        if not relative_name:
            raise ValueError("File name cannot be empty")
        name = PurePosixPath(relative_name)
        if name.is_absolute():
            raise ValueError(f"File name must be relative: {relative_name}")
        return self.path.joinpath(*name.parts)

    def __str__(self) -> str:
        return self.description or str(self.path)
