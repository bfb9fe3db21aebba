"""Project gallery endpoints. All rows are scoped to the caller."""

import structlog
from fastapi import APIRouter

from renova.api.auth import CurrentSession
from renova.api.errors import NOT_FOUND, error_response
from renova.models.contracts import (
    CreateProjectRequest,
    ErrorResponse,
    ProjectRecord,
    SaveToProjectRequest,
    SaveToProjectResponse,
)
from renova.services import projects as store
from renova.services.workspace import get_workspace

logger = structlog.get_logger()

router = APIRouter(tags=["projects"])

_STORE_RESPONSES = {404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}}


def _store_error(exc: store.ProjectStoreError):
    return error_response(503, "store_error", str(exc), retryable=True)


@router.get("/projects", response_model=list[ProjectRecord])
async def list_projects(session: CurrentSession) -> list[ProjectRecord]:
    """Caller's projects, newest first, each with its generations."""
    rows = await store.list_projects(session.db, session.user_id)
    return [store.to_project_record(p) for p in rows]


@router.post(
    "/projects",
    status_code=201,
    response_model=ProjectRecord,
    responses={422: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def create_project(body: CreateProjectRequest, session: CurrentSession):
    try:
        project = await store.create_project(
            session.db, session.user_id, body.name, body.original_image
        )
    except store.InvalidProjectError as exc:
        return error_response(422, "validation_error", str(exc))
    except store.ProjectStoreError as exc:
        return _store_error(exc)
    return store.to_project_record(project)


@router.post(
    "/projects/save",
    status_code=201,
    response_model=SaveToProjectResponse,
    responses={422: {"model": ErrorResponse}, **_STORE_RESPONSES},
)
async def save_to_project(body: SaveToProjectRequest, session: CurrentSession):
    """Save the workspace's current result into a new or existing project."""
    workspace = get_workspace(session.user_id)
    if workspace.upload is None or workspace.generated_image is None:
        return error_response(422, "validation_error", "There is no generated design to save.")

    try:
        project, saved = await store.save_generation(
            session.db,
            session.user_id,
            project_id=body.project_id,
            new_project_name=body.new_project_name,
            original_image=workspace.upload.preview,
            generated_image=workspace.generated_image,
            prompt=workspace.prompt,
        )
    except store.InvalidProjectError as exc:
        return error_response(422, "validation_error", str(exc))
    except store.ProjectNotFoundError:
        return error_response(404, *NOT_FOUND)
    except store.ProjectStoreError as exc:
        return _store_error(exc)

    return SaveToProjectResponse(
        project=store.to_project_record(project),
        generation_id=str(saved.id),
    )


@router.delete("/projects/{project_id}", status_code=204, responses=_STORE_RESPONSES)
async def delete_project(project_id: str, session: CurrentSession):
    """Delete a project together with its generations."""
    try:
        await store.delete_project(session.db, session.user_id, project_id)
    except store.ProjectNotFoundError:
        return error_response(404, *NOT_FOUND)
    except store.ProjectStoreError as exc:
        return _store_error(exc)


@router.delete(
    "/projects/{project_id}/generations/{generation_id}",
    status_code=204,
    responses=_STORE_RESPONSES,
)
async def delete_generation(project_id: str, generation_id: str, session: CurrentSession):
    try:
        await store.delete_generation(session.db, session.user_id, project_id, generation_id)
    except store.ProjectNotFoundError:
        return error_response(404, *NOT_FOUND)
    except store.ProjectStoreError as exc:
        return _store_error(exc)
