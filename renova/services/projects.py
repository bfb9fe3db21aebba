"""Project/gallery store.

Every operation is scoped to the owning identity: rows that belong to
someone else behave exactly like rows that do not exist.
"""

from __future__ import annotations

import asyncio
import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from renova.models.contracts import GenerationRecord, ProjectRecord
from renova.models.db import Generation, Project
from renova.utils import r2

logger = structlog.get_logger()


class ProjectNotFoundError(LookupError):
    pass


class InvalidProjectError(ValueError):
    pass


class ProjectStoreError(RuntimeError):
    """The store rejected or failed a write."""


def _parse_id(value: str | uuid.UUID) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise InvalidProjectError("Project name cannot be empty")
    return cleaned


def to_generation_record(generation: Generation) -> GenerationRecord:
    return GenerationRecord(
        id=str(generation.id),
        project_id=str(generation.project_id),
        generated_image=r2.resolve_url(generation.generated_image),
        prompt=generation.prompt,
        created_at=generation.created_at,
    )


def to_project_record(project: Project) -> ProjectRecord:
    return ProjectRecord(
        id=str(project.id),
        user_id=str(project.user_id),
        name=project.name,
        original_image=r2.resolve_url(project.original_image),
        created_at=project.created_at,
        generations=[to_generation_record(g) for g in project.generations],
    )


async def _offload(key_stem: str, image_ref: str) -> str:
    if not r2.r2_configured():
        return image_ref
    return await asyncio.to_thread(r2.store_image, key_stem, image_ref)


async def _commit(db: AsyncSession, event: str, **context: object) -> None:
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error(f"{event}_failed", error=str(exc), **context)
        raise ProjectStoreError("Could not save your changes. Please try again.") from exc


async def _get_owned_project(
    db: AsyncSession, owner_id: str | uuid.UUID, project_id: str | uuid.UUID
) -> Project:
    pid, oid = _parse_id(project_id), _parse_id(owner_id)
    if pid is None or oid is None:
        raise ProjectNotFoundError(str(project_id))
    stmt = (
        select(Project)
        .where(Project.id == pid, Project.user_id == oid)
        .options(selectinload(Project.generations))
        .execution_options(populate_existing=True)
    )
    project = (await db.execute(stmt)).scalar_one_or_none()
    if project is None:
        raise ProjectNotFoundError(str(project_id))
    return project


async def list_projects(db: AsyncSession, owner_id: str) -> list[Project]:
    """Newest project first; generations oldest first inside each project."""
    oid = _parse_id(owner_id)
    if oid is None:
        return []
    stmt = (
        select(Project)
        .where(Project.user_id == oid)
        .options(selectinload(Project.generations))
        .execution_options(populate_existing=True)
        .order_by(Project.created_at.desc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def create_project(
    db: AsyncSession, owner_id: str, name: str, original_image: str
) -> Project:
    project_id = uuid.uuid4()
    project = Project(
        id=project_id,
        user_id=uuid.UUID(owner_id),
        name=_clean_name(name),
        original_image=await _offload(f"projects/{project_id}/original", original_image),
        generations=[],
    )
    db.add(project)
    await _commit(db, "project_create", user_id=owner_id)
    logger.info("project_created", project_id=str(project_id), user_id=owner_id)
    return project


async def save_generation(
    db: AsyncSession,
    owner_id: str,
    *,
    project_id: str | None,
    new_project_name: str,
    original_image: str,
    generated_image: str,
    prompt: str,
) -> tuple[Project, Generation]:
    """Save one generation.

    project_id=None creates a project holding exactly this generation;
    otherwise exactly one generation is appended to the owned project.
    """
    if project_id is None:
        name = _clean_name(new_project_name)
        project_uuid = uuid.uuid4()
        project = Project(
            id=project_uuid,
            user_id=uuid.UUID(owner_id),
            name=name,
            original_image=await _offload(f"projects/{project_uuid}/original", original_image),
            generations=[],
        )
        db.add(project)
    else:
        project = await _get_owned_project(db, owner_id, project_id)

    generation_id = uuid.uuid4()
    generation = Generation(
        id=generation_id,
        project_id=project.id,
        generated_image=await _offload(
            f"projects/{project.id}/generations/{generation_id}", generated_image
        ),
        prompt=prompt,
    )
    project.generations.append(generation)
    await _commit(db, "generation_save", user_id=owner_id, project_id=str(project.id))
    logger.info(
        "generation_saved",
        project_id=str(project.id),
        generation_id=str(generation_id),
        new_project=project_id is None,
    )
    return project, generation


def _is_storage_key(ref: str) -> bool:
    return not ref.startswith(("data:", "http://", "https://"))


async def delete_project(db: AsyncSession, owner_id: str, project_id: str) -> None:
    """Delete the project and, by cascade, all of its generations."""
    project = await _get_owned_project(db, owner_id, project_id)
    offloaded = _is_storage_key(project.original_image)
    await db.delete(project)
    await _commit(db, "project_delete", user_id=owner_id, project_id=project_id)

    if offloaded and r2.r2_configured():
        try:
            await asyncio.to_thread(r2.delete_prefix, f"projects/{project.id}/")
        except Exception:
            # Rows are gone; orphaned objects are only a storage cost
            logger.error("r2_project_cleanup_failed", project_id=project_id, exc_info=True)
    logger.info("project_deleted", project_id=project_id, user_id=owner_id)


async def delete_generation(
    db: AsyncSession, owner_id: str, project_id: str, generation_id: str
) -> None:
    """Delete one generation; the project and its other generations stay."""
    project = await _get_owned_project(db, owner_id, project_id)
    gid = _parse_id(generation_id)
    generation = next((g for g in project.generations if g.id == gid), None)
    if generation is None:
        raise ProjectNotFoundError(generation_id)

    image_ref = generation.generated_image
    await db.delete(generation)
    await _commit(db, "generation_delete", user_id=owner_id, generation_id=generation_id)

    if _is_storage_key(image_ref) and r2.r2_configured():
        try:
            await asyncio.to_thread(r2.delete_object, image_ref)
        except Exception:
            logger.error("r2_generation_cleanup_failed", key=image_ref, exc_info=True)
    logger.info("generation_deleted", project_id=project_id, generation_id=generation_id)
