"""Per-identity working state between requests.

Holds the current upload, the latest generation result, internal views,
cost estimate and creativity-mode image. Lives in process memory and is
treated as disposable: saved projects are the durable record.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator
from dataclasses import dataclass, field

from renova.models.contracts import CostEstimate, WorkspaceMode, WorkspaceState
from renova.services.upload import NormalizedUpload


class WorkspaceBusyError(RuntimeError):
    """Another paid action is still running for this identity."""


@dataclass
class Workspace:
    mode: WorkspaceMode = "image"
    upload: NormalizedUpload | None = None
    prompt: str = ""
    generated_image: str | None = None
    internal_views: list[str] = field(default_factory=list)
    cost_estimate: CostEstimate | None = None
    creativity_image: str | None = None
    in_flight: bool = False

    def clear_results(self) -> None:
        self.prompt = ""
        self.generated_image = None
        self.internal_views = []
        self.cost_estimate = None

    def clear(self) -> None:
        """Drop the held upload and everything derived from it."""
        self.upload = None
        self.clear_results()

    def set_mode(self, mode: WorkspaceMode) -> None:
        # Results from one mode are meaningless in the other
        self.mode = mode
        self.clear()

    def hold(self, upload: NormalizedUpload) -> None:
        self.clear()
        self.upload = upload

    @contextlib.contextmanager
    def busy(self) -> Iterator[None]:
        if self.in_flight:
            raise WorkspaceBusyError("A request is already in progress")
        self.in_flight = True
        try:
            yield
        finally:
            self.in_flight = False

    def to_state(self) -> WorkspaceState:
        return WorkspaceState(
            mode=self.mode,
            source_filename=self.upload.filename if self.upload else None,
            original_preview=self.upload.preview if self.upload else None,
            is_pdf=self.upload.is_pdf if self.upload else False,
            prompt=self.prompt,
            generated_image=self.generated_image,
            internal_views=list(self.internal_views),
            cost_estimate=self.cost_estimate,
            creativity_image=self.creativity_image,
            in_flight=self.in_flight,
        )


_workspaces: dict[str, Workspace] = {}


def get_workspace(user_id: str) -> Workspace:
    workspace = _workspaces.get(user_id)
    if workspace is None:
        workspace = _workspaces[user_id] = Workspace()
    return workspace


def reset_workspaces() -> None:
    """Drop all workspaces (tests)."""
    _workspaces.clear()
