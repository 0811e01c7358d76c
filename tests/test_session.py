import json
from datetime import datetime

from query_hub.data.session import ExecutionSession, folder_name_for


STARTED = datetime(2026, 3, 9, 14, 5, 7)


def test_folder_name_uses_twelve_hour_clock():
    assert folder_name_for(STARTED) == "execution on 2026-03-09 (02_05_07 PM)"
    assert folder_name_for(datetime(2026, 3, 9, 0, 1, 2)) == "execution on 2026-03-09 (12_01_02 AM)"


def test_folder_is_created_lazily_and_once(tmp_path):
    session = ExecutionSession(root=str(tmp_path / "runs"), started_at=STARTED)
    assert session.folder is None
    assert not (tmp_path / "runs").exists()

    first = session.create_folder()
    assert first.is_dir()
    assert first.name == "execution on 2026-03-09 (02_05_07 PM)"
    assert session.create_folder() == first


def test_same_second_runs_get_distinct_folders(tmp_path):
    folders = [ExecutionSession(root=str(tmp_path), started_at=STARTED).create_folder() for _ in range(3)]
    assert [f.name for f in folders] == [
        "execution on 2026-03-09 (02_05_07 PM)",
        "execution on 2026-03-09 (02_05_07 PM)_1",
        "execution on 2026-03-09 (02_05_07 PM)_2",
    ]


def test_flush_logs_and_count_summary(tmp_path):
    session = ExecutionSession(root=str(tmp_path), started_at=STARTED)
    session.append_log("Connected to database: a")
    session.append_log("Disconnected from database: a")

    log_path = session.flush_logs()
    assert log_path.read_text(encoding="utf-8") == "Connected to database: a\nDisconnected from database: a\n"

    count_path = session.write_count_summary({"query_1": {"a": 3}}, {"query_1": "SELECT 1;"})
    assert count_path.name == "COUNT.txt"
    assert json.loads(count_path.read_text(encoding="utf-8")) == {
        "counts": {"query_1": {"a": 3}},
        "query_mapping": {"query_1": "SELECT 1;"},
    }


def test_empty_log_is_an_empty_file(tmp_path):
    session = ExecutionSession(root=str(tmp_path))
    assert session.flush_logs().read_text(encoding="utf-8") == ""
    assert session.exports_dir == session.folder / "exports"
