from datetime import datetime, timezone

import pytest

from domain.exceptions import RunStateError
from domain.run import ChainRunStatus
from domain.run_record import ChainRunRecord
from infrastructure.run.in_memory_run_repository import InMemoryRunRepository


def _record(run_id: str, chain: str = "gift") -> ChainRunRecord:
    now = datetime.now(timezone.utc)
    return ChainRunRecord(run_id=run_id, chain_name=chain, status=None, created_at=now, updated_at=now)


class TestInMemoryRunRepository:
    def test_create_and_get(self):
        repo = InMemoryRunRepository()
        repo.create(_record("r1"))

        assert repo.get("r1").run_id == "r1"
        assert repo.get("missing") is None

    def test_duplicate_create_raises(self):
        repo = InMemoryRunRepository()
        repo.create(_record("r1"))

        with pytest.raises(RunStateError):
            repo.create(_record("r1"))

    def test_finish_sets_status(self):
        repo = InMemoryRunRepository()
        repo.create(_record("r1"))

        finished = repo.finish("r1", ChainRunStatus.STOPPED, steps_completed=0)

        assert finished.status == ChainRunStatus.STOPPED
        assert repo.get("r1").status == ChainRunStatus.STOPPED

    def test_finish_twice_raises(self):
        repo = InMemoryRunRepository()
        repo.create(_record("r1"))
        repo.finish("r1", ChainRunStatus.COMMITTED, steps_completed=2)

        with pytest.raises(RunStateError):
            repo.finish("r1", ChainRunStatus.FAILED, error="late")

    def test_finish_unknown_raises(self):
        with pytest.raises(RunStateError):
            InMemoryRunRepository().finish("missing", ChainRunStatus.FAILED)

    def test_list_by_chain(self):
        repo = InMemoryRunRepository()
        repo.create(_record("r1"))
        repo.create(_record("r2", chain="other"))
        repo.create(_record("r3"))

        assert [r.run_id for r in repo.list_by_chain("gift")] == ["r1", "r3"]
