"""Tests for the soft delete / restore / permanent delete transitioners."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from snipvault.kinds import EntityKind
from snipvault.middleware.exceptions import (
    InvalidRequestError,
    PreconditionFailedError,
    ResourceNotFoundError,
    StoreUnavailableError,
)
from snipvault.models.activity_log import ActivityLog
from snipvault.models.folder import Folder
from snipvault.models.snippet import Snippet
from snipvault.services import lifecycle
from snipvault.services.lifecycle import TransitionError

ALICE = "user_alice"
BOB = "user_bob"

T0 = datetime(2026, 10, 1, 12, 0, 0)


@pytest.mark.unit
@pytest.mark.asyncio
class TestSoftDelete:

    async def test_soft_delete_sets_deleted_and_updated_at(self, db_session, seed):
        snippet = await seed.snippet(title="S1")

        outcome = await lifecycle.soft_delete(db_session, "snippet", snippet.id, ALICE, now=T0)
        await db_session.commit()

        assert outcome.ok
        assert outcome.deleted_at == T0
        row = await seed.reload(Snippet, snippet.id)
        assert row.deleted_at == T0
        assert row.updated_at == T0

    async def test_second_soft_delete_fails_and_keeps_first_timestamp(self, db_session, seed):
        snippet = await seed.snippet()

        first = await lifecycle.soft_delete(db_session, EntityKind.SNIPPET, snippet.id, ALICE, now=T0)
        await db_session.commit()
        second = await lifecycle.soft_delete(
            db_session, EntityKind.SNIPPET, snippet.id, ALICE, now=T0 + timedelta(hours=1)
        )
        await db_session.commit()

        assert first.ok
        assert second.error is TransitionError.PRECONDITION_FAILED
        row = await seed.reload(Snippet, snippet.id)
        assert row.deleted_at == T0

    async def test_soft_delete_unknown_id_is_precondition_failure(self, db_session):
        outcome = await lifecycle.soft_delete(db_session, "snippet", "does-not-exist", ALICE)
        assert outcome.error is TransitionError.PRECONDITION_FAILED

    async def test_soft_delete_folder_leaves_snippets_active(self, db_session, seed):
        folder = await seed.folder()
        snippet = await seed.snippet(folder_id=folder.id)

        outcome = await lifecycle.soft_delete(db_session, "folder", folder.id, ALICE)
        await db_session.commit()

        assert outcome.ok
        row = await seed.reload(Snippet, snippet.id)
        assert row.deleted_at is None
        assert row.folder_id == folder.id

    async def test_invalid_kind_and_missing_id(self, db_session):
        bad_kind = await lifecycle.soft_delete(db_session, "playlist", "x", ALICE)
        missing_id = await lifecycle.soft_delete(db_session, "snippet", "  ", ALICE)

        assert bad_kind.error is TransitionError.INVALID_REQUEST
        assert "playlist" in bad_kind.message
        assert missing_id.error is TransitionError.INVALID_REQUEST


@pytest.mark.unit
@pytest.mark.asyncio
class TestRestore:

    async def test_restore_is_idempotent(self, db_session, seed):
        snippet = await seed.deleted(await seed.snippet(), T0)

        first = await lifecycle.restore(db_session, "snippet", snippet.id, ALICE)
        await db_session.commit()
        second = await lifecycle.restore(db_session, "snippet", snippet.id, ALICE)
        await db_session.commit()

        assert first.ok and second.ok
        row = await seed.reload(Snippet, snippet.id)
        assert row.deleted_at is None

    async def test_restore_active_does_not_touch_updated_at(self, db_session, seed):
        snippet = await seed.snippet()
        before = (await seed.reload(Snippet, snippet.id)).updated_at

        outcome = await lifecycle.restore(
            db_session, "snippet", snippet.id, ALICE, now=T0 + timedelta(days=400)
        )
        await db_session.commit()

        assert outcome.ok
        assert (await seed.reload(Snippet, snippet.id)).updated_at == before

    async def test_restore_missing_is_not_found(self, db_session):
        outcome = await lifecycle.restore(db_session, "folder", "nope", ALICE)
        assert outcome.error is TransitionError.NOT_FOUND


@pytest.mark.unit
@pytest.mark.asyncio
class TestPermanentDelete:

    async def test_active_entity_is_refused_and_kept(self, db_session, seed):
        snippet = await seed.snippet()

        outcome = await lifecycle.permanent_delete(db_session, "snippet", snippet.id, ALICE)
        await db_session.commit()

        assert outcome.error is TransitionError.PRECONDITION_FAILED
        assert await seed.reload(Snippet, snippet.id) is not None

    async def test_purged_entity_cannot_be_restored(self, db_session, seed):
        snippet = await seed.deleted(await seed.snippet(), T0)

        purged = await lifecycle.permanent_delete(db_session, "snippet", snippet.id, ALICE)
        await db_session.commit()
        restored = await lifecycle.restore(db_session, "snippet", snippet.id, ALICE)

        assert purged.ok
        assert restored.error is TransitionError.NOT_FOUND
        assert await seed.reload(Snippet, snippet.id) is None

    async def test_purging_folder_detaches_but_keeps_snippets(self, db_session, seed):
        folder = await seed.folder(name="F1")
        snippets = [await seed.snippet(title=f"S{i}", folder_id=folder.id) for i in range(3)]
        await seed.deleted(folder, T0)

        outcome = await lifecycle.permanent_delete(db_session, "folder", folder.id, ALICE)
        await db_session.commit()

        assert outcome.ok
        assert outcome.detached_children == 3
        assert await seed.reload(Folder, folder.id) is None
        for snippet in snippets:
            row = await seed.reload(Snippet, snippet.id)
            assert row is not None
            assert row.deleted_at is None
            assert row.folder_id is None

    async def test_missing_entity_is_not_found(self, db_session):
        outcome = await lifecycle.permanent_delete(db_session, "category", "nope", ALICE)
        assert outcome.error is TransitionError.NOT_FOUND

    async def test_cutoff_spares_entities_deleted_after_it(self, db_session, seed):
        snippet_id = (await seed.deleted(await seed.snippet(), T0)).id

        outcome = await lifecycle.permanent_delete(
            db_session, "snippet", snippet_id, ALICE, deleted_before=T0 - timedelta(days=1)
        )
        await db_session.commit()

        assert outcome.error is TransitionError.PRECONDITION_FAILED
        assert "grace period" in outcome.message
        assert (await seed.reload(Snippet, snippet_id)).deleted_at == T0

    async def test_cutoff_purges_entities_deleted_before_it(self, db_session, seed):
        snippet_id = (await seed.deleted(await seed.snippet(), T0)).id

        outcome = await lifecycle.permanent_delete(
            db_session, "snippet", snippet_id, ALICE, deleted_before=T0
        )
        await db_session.commit()

        assert outcome.ok
        assert await seed.reload(Snippet, snippet_id) is None


@pytest.mark.unit
@pytest.mark.asyncio
class TestOwnerIsolation:
    """Another user's entity behaves exactly like a missing one."""

    async def test_cannot_soft_delete_foreign_entity(self, db_session, seed):
        snippet = await seed.snippet(owner_id=BOB)

        foreign = await lifecycle.soft_delete(db_session, "snippet", snippet.id, ALICE)
        missing = await lifecycle.soft_delete(db_session, "snippet", "missing", ALICE)
        await db_session.commit()

        assert foreign.error is missing.error is TransitionError.PRECONDITION_FAILED
        assert (await seed.reload(Snippet, snippet.id)).deleted_at is None

    async def test_cannot_restore_foreign_entity(self, db_session, seed):
        snippet = await seed.deleted(await seed.snippet(owner_id=BOB), T0)

        outcome = await lifecycle.restore(db_session, "snippet", snippet.id, ALICE)
        await db_session.commit()

        assert outcome.error is TransitionError.NOT_FOUND
        assert (await seed.reload(Snippet, snippet.id)).deleted_at == T0

    async def test_cannot_purge_foreign_entity(self, db_session, seed):
        snippet = await seed.deleted(await seed.snippet(owner_id=BOB), T0)

        outcome = await lifecycle.permanent_delete(db_session, "snippet", snippet.id, ALICE)
        await db_session.commit()

        assert outcome.error is TransitionError.NOT_FOUND
        assert await seed.reload(Snippet, snippet.id) is not None

    async def test_purging_folder_never_detaches_foreign_snippets(self, db_session, seed):
        folder = await seed.deleted(await seed.folder(), T0)
        # Pathological cross-owner link; the detach is still owner-scoped
        foreign = await seed.snippet(owner_id=BOB, folder_id=folder.id)

        outcome = await lifecycle.permanent_delete(db_session, "folder", folder.id, ALICE)
        await db_session.commit()

        assert outcome.ok
        assert (await seed.reload(Snippet, foreign.id)).folder_id == folder.id


@pytest.mark.unit
@pytest.mark.asyncio
class TestAuditAndFailures:

    async def test_each_transition_is_logged(self, db_session, seed):
        snippet = await seed.snippet()

        await lifecycle.soft_delete(db_session, "snippet", snippet.id, ALICE)
        await lifecycle.restore(db_session, "snippet", snippet.id, ALICE)
        await lifecycle.soft_delete(db_session, "snippet", snippet.id, ALICE)
        await lifecycle.permanent_delete(db_session, "snippet", snippet.id, ALICE)
        await db_session.commit()

        result = await db_session.execute(
            select(ActivityLog.action)
            .where(ActivityLog.entity_id == snippet.id)
            .order_by(ActivityLog.created_at, ActivityLog.action)
        )
        actions = result.scalars().all()
        assert sorted(actions) == ["deleted", "deleted", "purged", "restored"]

    async def test_restoring_an_active_entity_is_not_logged(self, db_session, seed):
        snippet_id = (await seed.snippet()).id

        outcome = await lifecycle.restore(db_session, "snippet", snippet_id, ALICE)
        await db_session.commit()

        assert outcome.ok
        assert outcome.message == "Snippet is already active"
        result = await db_session.execute(
            select(ActivityLog).where(ActivityLog.entity_id == snippet_id)
        )
        assert result.scalars().all() == []

    async def test_refused_transition_is_not_logged(self, db_session):
        await lifecycle.restore(db_session, "snippet", "missing", ALICE)
        await db_session.commit()

        result = await db_session.execute(select(ActivityLog))
        assert result.scalars().all() == []

    async def test_store_failure_becomes_retryable_outcome(self, db_session, monkeypatch):
        async def broken_execute(*args, **kwargs):
            raise OperationalError("UPDATE snippets", {}, Exception("connection reset"))

        monkeypatch.setattr(db_session, "execute", broken_execute)

        outcome = await lifecycle.soft_delete(db_session, "snippet", "any", ALICE)

        assert outcome.error is TransitionError.STORE_UNAVAILABLE
        assert outcome.retryable


@pytest.mark.unit
class TestRaiseForOutcome:

    def test_maps_each_error_class(self):
        cases = {
            TransitionError.INVALID_REQUEST: InvalidRequestError,
            TransitionError.NOT_FOUND: ResourceNotFoundError,
            TransitionError.PRECONDITION_FAILED: PreconditionFailedError,
            TransitionError.STORE_UNAVAILABLE: StoreUnavailableError,
        }
        for error, exc_type in cases.items():
            outcome = lifecycle.TransitionOutcome(
                kind="snippet", entity_id="abc", error=error, message="boom"
            )
            with pytest.raises(exc_type):
                lifecycle.raise_for_outcome(outcome)

    def test_success_passes_through(self):
        outcome = lifecycle.TransitionOutcome(kind="snippet", entity_id="abc")
        assert lifecycle.raise_for_outcome(outcome) is outcome
