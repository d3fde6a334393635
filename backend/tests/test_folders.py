"""Tests for folders — membership invariant, move, cascade delete, lazy cleanup."""

import pytest

from mdshelf.errors import NotFoundError, ValidationFailedError
from mdshelf.schemas.records import FOLDER_ID_PREFIX, FOLDERS_KEY
from mdshelf.services.metadata import load_meta


async def _assert_single_membership(folders, store, file_id):
    """The file is in at most one folder and its folderId agrees."""
    holders = [f.id for f in await folders.read() if file_id in f.file_ids]
    assert len(holders) <= 1
    meta = await load_meta(store, file_id)
    assert meta.folder_id == (holders[0] if holders else None)


class TestCreateRename:
    @pytest.mark.asyncio
    async def test_create(self, folders, clock):
        folder = await folders.create("  Work  ")
        assert folder.name == "Work"
        assert folder.id.startswith(FOLDER_ID_PREFIX)
        assert folder.file_ids == []
        assert folder.created == clock.now

    @pytest.mark.asyncio
    async def test_duplicate_names_allowed(self, folders):
        a = await folders.create("Same")
        b = await folders.create("Same")
        assert a.id != b.id
        assert len(await folders.read()) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", [None, "", "   "])
    async def test_create_requires_name(self, folders, name):
        with pytest.raises(ValidationFailedError):
            await folders.create(name)

    @pytest.mark.asyncio
    async def test_rename(self, folders):
        folder = await folders.create("Old")
        await folders.rename(folder.id, "New")
        assert (await folders.read())[0].name == "New"

    @pytest.mark.asyncio
    async def test_rename_unknown(self, folders):
        with pytest.raises(NotFoundError):
            await folders.rename("folder-nope", "x")

    @pytest.mark.asyncio
    async def test_rename_validates_before_lookup(self, folders):
        with pytest.raises(ValidationFailedError):
            await folders.rename("folder-nope", " ")


class TestMembership:
    @pytest.mark.asyncio
    async def test_add_file(self, folders, files, store):
        folder = await folders.create("F")
        meta = await files.paste("x")

        updated = await folders.add_file(folder.id, meta.id)

        assert updated.file_ids == [meta.id]
        await _assert_single_membership(folders, store, meta.id)

    @pytest.mark.asyncio
    async def test_add_file_preserves_insertion_order(self, folders, files):
        folder = await folders.create("F")
        ids = [(await files.paste(str(i))).id for i in range(3)]
        for fid in reversed(ids):
            await folders.add_file(folder.id, fid)
        await folders.add_file(folder.id, ids[2])

        assert (await folders.read())[0].file_ids == list(reversed(ids))

    @pytest.mark.asyncio
    async def test_add_file_unknown_folder(self, folders, files):
        meta = await files.paste("x")
        with pytest.raises(NotFoundError, match="Folder"):
            await folders.add_file("folder-nope", meta.id)

    @pytest.mark.asyncio
    async def test_add_file_unknown_file(self, folders):
        folder = await folders.create("F")
        with pytest.raises(NotFoundError, match="File"):
            await folders.add_file(folder.id, "nope")
        assert (await folders.read())[0].file_ids == []

    @pytest.mark.asyncio
    async def test_add_to_second_folder_moves(self, folders, files, store):
        a = await folders.create("A")
        b = await folders.create("B")
        meta = await files.paste("x")

        await folders.add_file(a.id, meta.id)
        await folders.add_file(b.id, meta.id)

        by_id = {f.id: f for f in await folders.read()}
        assert by_id[a.id].file_ids == []
        assert by_id[b.id].file_ids == [meta.id]
        await _assert_single_membership(folders, store, meta.id)

    @pytest.mark.asyncio
    async def test_invariant_over_sequence(self, folders, files, store):
        fs = [await folders.create(n) for n in "ABC"]
        meta = await files.paste("x")

        await folders.add_file(fs[0].id, meta.id)
        await folders.move(fs[0].id, meta.id, fs[1].id)
        await folders.add_file(fs[2].id, meta.id)
        await folders.move(fs[2].id, meta.id, fs[0].id)
        await folders.move(fs[2].id, meta.id, fs[0].id)

        await _assert_single_membership(folders, store, meta.id)
        assert (await load_meta(store, meta.id)).folder_id == fs[0].id

    @pytest.mark.asyncio
    async def test_remove_file(self, folders, files, store):
        folder = await folders.create("F")
        meta = await files.paste("x")
        await folders.add_file(folder.id, meta.id)

        await folders.remove_file(folder.id, meta.id)

        assert (await folders.read())[0].file_ids == []
        assert (await load_meta(store, meta.id)).folder_id is None
        assert '"folderId"' not in await store.get(f"meta:{meta.id}")

    @pytest.mark.asyncio
    async def test_remove_file_missing_metadata(self, folders, files):
        folder = await folders.create("F")
        meta = await files.paste("x")
        await folders.add_file(folder.id, meta.id)
        await files.delete(meta.id)

        updated = await folders.remove_file(folder.id, meta.id)
        assert updated.file_ids == []

    @pytest.mark.asyncio
    async def test_remove_file_unknown_folder(self, folders):
        with pytest.raises(NotFoundError):
            await folders.remove_file("folder-nope", "x")

    @pytest.mark.asyncio
    async def test_move(self, folders, files, store):
        a = await folders.create("A")
        b = await folders.create("B")
        meta = await files.paste("x")
        await folders.add_file(a.id, meta.id)

        target = await folders.move(a.id, meta.id, b.id)

        assert target.file_ids == [meta.id]
        await _assert_single_membership(folders, store, meta.id)

    @pytest.mark.asyncio
    async def test_move_is_idempotent(self, folders, files):
        a = await folders.create("A")
        b = await folders.create("B")
        meta = await files.paste("x")
        await folders.add_file(a.id, meta.id)

        await folders.move(a.id, meta.id, b.id)
        await folders.move(a.id, meta.id, b.id)

        by_id = {f.id: f for f in await folders.read()}
        assert by_id[b.id].file_ids == [meta.id]
        assert by_id[a.id].file_ids == []

    @pytest.mark.asyncio
    async def test_move_unknown_file(self, folders):
        a = await folders.create("A")
        b = await folders.create("B")

        with pytest.raises(NotFoundError, match="File"):
            await folders.move(a.id, "no-such-file", b.id)

        assert all(f.file_ids == [] for f in await folders.read())

    @pytest.mark.asyncio
    async def test_move_unknown_folders(self, folders, files):
        a = await folders.create("A")
        meta = await files.paste("x")
        with pytest.raises(NotFoundError):
            await folders.move("folder-nope", meta.id, a.id)
        with pytest.raises(NotFoundError):
            await folders.move(a.id, meta.id, "folder-nope")


class TestDelete:
    @pytest.mark.asyncio
    async def test_cascade(self, folders, files, store, blobs, history):
        g = await folders.create("G")
        other = await folders.create("Other")
        c = await files.paste("c")
        keep = await files.paste("keep")
        await folders.add_file(g.id, c.id)

        deleted = await folders.delete(g.id)

        assert deleted == [c.id]
        assert await blobs.get(f"{c.id}.md") is None
        assert await store.get(f"meta:{c.id}") is None
        assert [e.id for e in await history.read()] == [keep.id]
        assert [f.id for f in await folders.read()] == [other.id]
        assert [v.folder.id for v in await folders.list()] == [other.id]
        assert await load_meta(store, keep.id) is not None

    @pytest.mark.asyncio
    async def test_cascade_tolerates_already_deleted_members(self, folders, files):
        g = await folders.create("G")
        meta = await files.paste("x")
        await folders.add_file(g.id, meta.id)
        await files.delete(meta.id)

        assert await folders.delete(g.id) == [meta.id]
        assert await folders.read() == []

    @pytest.mark.asyncio
    async def test_cascade_with_unmappable_member_id(self, folders, store):
        g = await folders.create("G")
        stored = await folders.read()
        stored[0].file_ids = [".x", "../up"]
        await store.put_list(FOLDERS_KEY, stored)

        assert await folders.delete(g.id) == [".x", "../up"]
        assert await folders.read() == []

    @pytest.mark.asyncio
    async def test_delete_unknown(self, folders):
        with pytest.raises(NotFoundError):
            await folders.delete("folder-nope")


class TestList:
    @pytest.mark.asyncio
    async def test_list_resolves_and_drops_dangling(self, folders, files):
        f = await folders.create("F")
        a = await files.paste("a", "A")
        b = await files.paste("b", "B")
        await folders.add_file(f.id, a.id)
        await folders.add_file(f.id, b.id)
        await files.delete(a.id)

        views = await folders.list()

        assert len(views) == 1
        assert [m.filename for m in views[0].files] == ["B"]
        # Underlying membership is not repaired eagerly
        assert views[0].folder.file_ids == [a.id, b.id]

    @pytest.mark.asyncio
    async def test_get_unknown(self, folders):
        with pytest.raises(NotFoundError):
            await folders.get("folder-nope")

    @pytest.mark.asyncio
    async def test_membership(self, folders, files):
        f = await folders.create("F")
        a = await files.paste("a")
        await folders.add_file(f.id, a.id)
        assert await folders.membership() == {f.id: {a.id}}

    @pytest.mark.asyncio
    async def test_corrupt_folder_list_reads_empty(self, folders, store):
        await store.put("folders", "garbage")
        assert await folders.list() == []
        folder = await folders.create("Fresh")
        assert [f.id for f in await folders.read()] == [folder.id]
