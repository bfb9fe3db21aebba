"""Tests for the project/gallery store (renova/services/projects.py).

Runs against in-memory SQLite; R2 stays unconfigured so image references are
stored as given.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from renova.models.db import Generation, Project
from renova.services import projects as store
from renova.utils import r2

ORIGINAL = "data:image/png;base64,b3JpZ2luYWw="
GENERATED = "data:image/png;base64,Z2VuZXJhdGVk"


async def _count(db, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


class TestCreateProject:
    @pytest.mark.asyncio
    async def test_creates_with_trimmed_name(self, db, make_profile):
        owner = await make_profile()
        project = await store.create_project(db, str(owner.id), "  Cozinha  ", ORIGINAL)
        assert project.name == "Cozinha"
        assert project.original_image == ORIGINAL
        assert project.generations == []

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, db, make_profile):
        owner = await make_profile()
        with pytest.raises(store.InvalidProjectError):
            await store.create_project(db, str(owner.id), "   ", ORIGINAL)
        assert await _count(db, Project) == 0


class TestSaveGeneration:
    @pytest.mark.asyncio
    async def test_without_project_creates_one_with_one_generation(self, db, make_profile):
        owner = await make_profile()
        project, generation = await store.save_generation(
            db,
            str(owner.id),
            project_id=None,
            new_project_name="Sala",
            original_image=ORIGINAL,
            generated_image=GENERATED,
            prompt="paredes azuis",
        )

        assert await _count(db, Project) == 1
        assert await _count(db, Generation) == 1
        assert project.name == "Sala"
        assert [g.id for g in project.generations] == [generation.id]
        assert generation.prompt == "paredes azuis"

    @pytest.mark.asyncio
    async def test_with_project_appends_exactly_one(self, db, make_profile):
        owner = await make_profile()
        project, first = await store.save_generation(
            db,
            str(owner.id),
            project_id=None,
            new_project_name="Sala",
            original_image=ORIGINAL,
            generated_image=GENERATED,
            prompt="v1",
        )

        same, second = await store.save_generation(
            db,
            str(owner.id),
            project_id=str(project.id),
            new_project_name="ignored",
            original_image=ORIGINAL,
            generated_image=GENERATED,
            prompt="v2",
        )

        assert same.id == project.id
        assert await _count(db, Project) == 1
        assert await _count(db, Generation) == 2
        assert [g.prompt for g in same.generations] == ["v1", "v2"]
        assert second.id != first.id

    @pytest.mark.asyncio
    async def test_new_project_needs_name(self, db, make_profile):
        owner = await make_profile()
        with pytest.raises(store.InvalidProjectError):
            await store.save_generation(
                db,
                str(owner.id),
                project_id=None,
                new_project_name="",
                original_image=ORIGINAL,
                generated_image=GENERATED,
                prompt="p",
            )

    @pytest.mark.asyncio
    async def test_cannot_append_to_someone_elses_project(self, db, make_profile):
        owner = await make_profile()
        intruder = await make_profile()
        project = await store.create_project(db, str(owner.id), "Meu", ORIGINAL)

        with pytest.raises(store.ProjectNotFoundError):
            await store.save_generation(
                db,
                str(intruder.id),
                project_id=str(project.id),
                new_project_name="",
                original_image=ORIGINAL,
                generated_image=GENERATED,
                prompt="p",
            )
        assert await _count(db, Generation) == 0


class TestListProjects:
    @pytest.mark.asyncio
    async def test_newest_first_and_scoped(self, db, make_profile):
        owner = await make_profile()
        other = await make_profile()
        base = datetime(2025, 1, 1, tzinfo=UTC)
        for i, name in enumerate(["old", "mid", "new"]):
            db.add(
                Project(
                    user_id=owner.id,
                    name=name,
                    original_image=ORIGINAL,
                    created_at=base + timedelta(days=i),
                )
            )
        db.add(Project(user_id=other.id, name="not mine", original_image=ORIGINAL))
        await db.commit()

        rows = await store.list_projects(db, str(owner.id))

        assert [p.name for p in rows] == ["new", "mid", "old"]

    @pytest.mark.asyncio
    async def test_record_includes_generations(self, db, make_profile):
        owner = await make_profile()
        project, _ = await store.save_generation(
            db,
            str(owner.id),
            project_id=None,
            new_project_name="Quarto",
            original_image=ORIGINAL,
            generated_image=GENERATED,
            prompt="p",
        )

        [row] = await store.list_projects(db, str(owner.id))
        record = store.to_project_record(row)

        assert record.id == str(project.id)
        assert record.original_image == ORIGINAL
        assert len(record.generations) == 1
        assert record.generations[0].generated_image == GENERATED


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_generation_keeps_siblings(self, db, make_profile):
        owner = await make_profile()
        project, first = await store.save_generation(
            db,
            str(owner.id),
            project_id=None,
            new_project_name="Sala",
            original_image=ORIGINAL,
            generated_image=GENERATED,
            prompt="a",
        )
        _, second = await store.save_generation(
            db,
            str(owner.id),
            project_id=str(project.id),
            new_project_name="",
            original_image=ORIGINAL,
            generated_image=GENERATED,
            prompt="b",
        )

        await store.delete_generation(db, str(owner.id), str(project.id), str(first.id))

        [row] = await store.list_projects(db, str(owner.id))
        assert [g.id for g in row.generations] == [second.id]

    @pytest.mark.asyncio
    async def test_delete_project_cascades(self, db, make_profile):
        owner = await make_profile()
        project, _ = await store.save_generation(
            db,
            str(owner.id),
            project_id=None,
            new_project_name="Sala",
            original_image=ORIGINAL,
            generated_image=GENERATED,
            prompt="a",
        )

        await store.delete_project(db, str(owner.id), str(project.id))

        assert await _count(db, Project) == 0
        assert await _count(db, Generation) == 0

    @pytest.mark.asyncio
    async def test_other_owner_gets_not_found(self, db, make_profile):
        owner = await make_profile()
        intruder = await make_profile()
        project, generation = await store.save_generation(
            db,
            str(owner.id),
            project_id=None,
            new_project_name="Sala",
            original_image=ORIGINAL,
            generated_image=GENERATED,
            prompt="a",
        )

        with pytest.raises(store.ProjectNotFoundError):
            await store.delete_project(db, str(intruder.id), str(project.id))
        with pytest.raises(store.ProjectNotFoundError):
            await store.delete_generation(
                db, str(intruder.id), str(project.id), str(generation.id)
            )
        assert await _count(db, Generation) == 1

    @pytest.mark.asyncio
    async def test_malformed_id_is_not_found(self, db, make_profile):
        owner = await make_profile()
        with pytest.raises(store.ProjectNotFoundError):
            await store.delete_project(db, str(owner.id), "not-a-uuid")


class TestR2Offload:
    @pytest.mark.asyncio
    async def test_images_uploaded_when_configured(self, db, make_profile):
        owner = await make_profile()
        with (
            patch.object(r2, "r2_configured", return_value=True),
            patch.object(r2, "store_image", side_effect=lambda stem, ref: f"{stem}.png") as put,
        ):
            project, generation = await store.save_generation(
                db,
                str(owner.id),
                project_id=None,
                new_project_name="Sala",
                original_image=ORIGINAL,
                generated_image=GENERATED,
                prompt="a",
            )

        assert project.original_image == f"projects/{project.id}/original.png"
        assert generation.generated_image == (
            f"projects/{project.id}/generations/{generation.id}.png"
        )
        assert put.call_count == 2
