import pytest
from click.testing import CliRunner

from relay_engine import db
from relay_engine.cli import cli, commands
from relay_engine.errors import LedgerError

from .helpers import FakeLedger, job_payload, make_event


@pytest.fixture
def runner():
    return CliRunner()


def _add_job(job_id, **overrides):
    fields = {
        "id": job_id,
        "creator": "0xA",
        "pool_id": 3,
        "price": 1000000,
        "buyer_public_key": b"\x01",
        "epochs": 10,
        "learning_rate": 100,
    }
    fields.update(overrides)
    db.upsert_job(fields)


def test_jobs_empty(runner):
    result = runner.invoke(cli, ["jobs"])
    assert result.exit_code == 0
    assert "No jobs found" in result.output


def test_jobs_table(runner):
    _add_job(7)
    _add_job(8)
    db.start_job(8)

    result = runner.invoke(cli, ["jobs"])
    assert result.exit_code == 0
    assert "PENDING" in result.output
    assert "IN_PROGRESS" in result.output

    result = runner.invoke(cli, ["jobs", "--status", "IN_PROGRESS"])
    assert "IN_PROGRESS" in result.output
    assert "PENDING" not in result.output


def test_status(runner):
    _add_job(7)
    db.start_job(7)
    db.fail_job(7, "Pool 3 has no data blobs")

    result = runner.invoke(cli, ["status", "7"])
    assert result.exit_code == 0
    assert "Status: FAILED" in result.output
    assert "Error: Pool 3 has no data blobs" in result.output


def test_status_unknown_job(runner):
    result = runner.invoke(cli, ["status", "404"])
    assert result.exit_code != 0
    assert "Job 404 not found" in result.output


def test_cursors_and_reset(runner):
    result = runner.invoke(cli, ["cursors"])
    assert "starts from genesis" in result.output

    db.save_cursor("JobCreated", {"txDigest": "9vD1", "eventSeq": "0"})
    result = runner.invoke(cli, ["cursors"])
    assert "9vD1" in result.output

    result = runner.invoke(cli, ["reset-cursors", "--yes"])
    assert result.exit_code == 0
    assert "Deleted 1 cursors" in result.output
    assert db.get_cursor("JobCreated") is None


def test_reset_cursors_asks_first(runner):
    db.save_cursor("JobCreated", {"txDigest": "9vD1", "eventSeq": "0"})
    result = runner.invoke(cli, ["reset-cursors"], input="n\n")
    assert result.exit_code != 0
    assert db.get_cursor("JobCreated") is not None


class _LedgerContext(FakeLedger):
    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        pass


def test_events(runner, monkeypatch):
    ledger = _LedgerContext([
        make_event(1, job_payload(7)),
        make_event(2, {}, event_type="0xpkg::jobs::PoolCreated"),
    ])
    monkeypatch.setattr(commands, "fullnode_client", lambda settings: ledger)

    result = runner.invoke(cli, ["events", "--limit", "5"])
    assert result.exit_code == 0
    assert "JobCreated" in result.output
    assert "PoolCreated" in result.output


def test_events_query_failure(runner, monkeypatch):
    ledger = _LedgerContext([])
    ledger.fail_next = 1
    monkeypatch.setattr(commands, "fullnode_client", lambda settings: ledger)

    result = runner.invoke(cli, ["events"])
    assert result.exit_code != 0
    assert "Event query failed" in result.output


def test_resume_refuses_non_pending(runner):
    _add_job(7)
    db.start_job(7)
    result = runner.invoke(cli, ["resume", "7"])
    assert result.exit_code != 0
    assert "only PENDING jobs can be resumed" in result.output


def test_resume_unknown_job(runner):
    result = runner.invoke(cli, ["resume", "404"])
    assert result.exit_code != 0
    assert "not found" in result.output
