"""
Movement Cost Schema
====================

Validated configuration for the grid movement model.

The values here are tunables, not laws: the diagonal cost approximates
sqrt(2) and the tie-break scale only needs to be small relative to the
cheapest step.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MoveCosts(BaseModel):
    """Cost constants and switches for ``GridMover``."""

    orthogonal: float = Field(default=1.0, ge=0.0)
    """Cost of a step that changes exactly one coordinate."""

    diagonal: float = Field(default=1.4, ge=0.0)
    """Cost of a step that changes both coordinates."""

    tie_break_scale: float = Field(default=0.001, ge=0.0)
    """
    Weight of the cross-product term added to the heuristic.

    Nudges the search toward paths that stay on the straight line from start
    to target. Zero disables it and keeps the heuristic strictly admissible.
    """

    allow_diagonal: bool = True
    """
    Whether diagonal steps are allowed when they don't cut a corner.

    When False every diagonal step into an open node is refused, which
    restricts movement to orthogonal steps.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _validate_costs(self) -> "MoveCosts":
        """Ensure a diagonal step is never cheaper than an orthogonal one."""
        if self.diagonal < self.orthogonal:
            raise ValueError("diagonal cost must be greater than or equal to orthogonal cost")
        return self

    def step_cost(self, diagonal: bool) -> float:
        """Cost of one step of the given kind."""
        return self.diagonal if diagonal else self.orthogonal
