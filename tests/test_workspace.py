"""Tests for the per-identity workspace state."""

import pytest

from renova.models.contracts import CostEstimate
from renova.services.upload import NormalizedUpload
from renova.services.workspace import (
    Workspace,
    WorkspaceBusyError,
    get_workspace,
)
from renova.utils.image import ImagePayload
from tests.factories import png_bytes


def _upload(name: str = "sala.png") -> NormalizedUpload:
    image = ImagePayload(data=png_bytes(), mime_type="image/png")
    return NormalizedUpload(
        image=image, filename=name, preview=image.to_data_url(), is_pdf=False
    )


def _with_results() -> Workspace:
    workspace = Workspace()
    workspace.hold(_upload())
    workspace.prompt = "paredes azuis"
    workspace.generated_image = "data:image/png;base64,AA=="
    workspace.internal_views = ["data:image/png;base64,AQ=="]
    workspace.cost_estimate = CostEstimate(
        items=[], total_material_cost=0, total_labor_cost=0, total_cost=0
    )
    return workspace


class TestClearing:
    def test_clear_results_keeps_upload(self):
        workspace = _with_results()
        workspace.clear_results()
        assert workspace.upload is not None
        assert workspace.prompt == ""
        assert workspace.generated_image is None
        assert workspace.internal_views == []
        assert workspace.cost_estimate is None

    def test_hold_replaces_upload_and_drops_results(self):
        workspace = _with_results()
        workspace.hold(_upload("cozinha.png"))
        assert workspace.upload.filename == "cozinha.png"
        assert workspace.generated_image is None

    def test_set_mode_clears_everything(self):
        workspace = _with_results()
        workspace.set_mode("floorplan")
        assert workspace.mode == "floorplan"
        assert workspace.upload is None
        assert workspace.generated_image is None

    def test_creativity_image_survives_clear(self):
        workspace = _with_results()
        workspace.creativity_image = "data:image/png;base64,Ag=="
        workspace.clear()
        assert workspace.creativity_image == "data:image/png;base64,Ag=="


class TestBusy:
    def test_second_entry_rejected(self):
        workspace = Workspace()
        with workspace.busy():
            assert workspace.in_flight
            with pytest.raises(WorkspaceBusyError), workspace.busy():
                pass
        assert not workspace.in_flight

    def test_released_on_error(self):
        workspace = Workspace()
        with pytest.raises(RuntimeError, match="boom"), workspace.busy():
            raise RuntimeError("boom")
        assert not workspace.in_flight


class TestRegistry:
    def test_one_workspace_per_identity(self):
        assert get_workspace("a") is get_workspace("a")
        assert get_workspace("a") is not get_workspace("b")


class TestState:
    def test_snapshot(self):
        state = _with_results().to_state()
        assert state.mode == "image"
        assert state.source_filename == "sala.png"
        assert state.original_preview.startswith("data:image/png;base64,")
        assert state.prompt == "paredes azuis"
        assert state.internal_views == ["data:image/png;base64,AQ=="]
        assert state.in_flight is False
