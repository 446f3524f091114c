import json

import numpy as np

from betlang.logger import RunLogger


def test_logger_appends_jsonl_records(tmp_path):
    logger = RunLogger(tmp_path / "out")
    logger.log("start", {"seed": 42})
    logger.log("value", {"x": np.float64(1.5)})

    lines = logger.path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["event"] == "start"
    assert first["payload"] == {"seed": 42}
    assert "ts_utc" in first

    records = logger.read()
    assert [r["event"] for r in records] == ["start", "value"]


def test_read_before_any_log_is_empty(tmp_path):
    assert RunLogger(tmp_path, filename="empty.jsonl").read() == []
