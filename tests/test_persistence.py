"""
Tests for the audit ledger.
"""

from pathlib import Path

from hostprov.core.persistence.audit import AuditEntry, AuditWriter


class TestAuditWriter:
    def test_write_and_read(self, tmp_path: Path):
        writer = AuditWriter(tmp_path / ".hostprov" / "audit.ndjson")
        writer.write(AuditEntry(run_id="run-1", status="ok", steps=["preflight", "sudo"]))
        writer.write(AuditEntry(run_id="run-2", status="failed", failed_step="transfer", error="boom"))

        entries = writer.read_all()
        assert [e.run_id for e in entries] == ["run-1", "run-2"]
        assert entries[0].steps == ["preflight", "sudo"]
        assert entries[1].failed_step == "transfer"
        assert entries[0].timestamp

    def test_append_only(self, tmp_path: Path):
        path = tmp_path / "audit.ndjson"
        writer = AuditWriter(path)
        writer.write(AuditEntry(run_id="a"))
        first_line = path.read_text().splitlines()[0]
        writer.write(AuditEntry(run_id="b"))
        assert path.read_text().splitlines()[0] == first_line

    def test_read_missing_file(self, tmp_path: Path):
        assert AuditWriter(tmp_path / "none.ndjson").read_all() == []

    def test_corrupt_lines_skipped(self, tmp_path: Path):
        path = tmp_path / "audit.ndjson"
        writer = AuditWriter(path)
        writer.write(AuditEntry(run_id="good-1"))
        with path.open("a") as f:
            f.write("{not json\n\n")
            f.write('{"run_id": ["wrong type"]}\n')
        writer.write(AuditEntry(run_id="good-2"))

        assert [e.run_id for e in writer.read_all()] == ["good-1", "good-2"]

    def test_read_recent(self, tmp_path: Path):
        writer = AuditWriter(tmp_path / "audit.ndjson")
        for i in range(5):
            writer.write(AuditEntry(run_id=f"run-{i}"))
        assert [e.run_id for e in writer.read_recent(2)] == ["run-3", "run-4"]

    def test_write_failure_does_not_raise(self, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        AuditWriter(blocker / "audit.ndjson").write(AuditEntry(run_id="x"))
