import json

import pytest

from chromacut.pipeline import DecodeFailure, PipelineLogger


@pytest.fixture
def plog(tmp_path):
    return PipelineLogger(log_file=tmp_path / "nested" / "debug.log")


def _records(plog):
    return [json.loads(line) for line in plog.log_file.read_text().splitlines()]


def test_stage_before_start_is_an_error(plog):
    with pytest.raises(RuntimeError):
        plog.log_s1(key_color="#00FF00")


def test_finish_image_writes_ok_record(plog):
    plog.start_image("a.png")
    plog.log_s2(removed_pixels=3)
    plog.finish_image("a_transparent.png")

    (record,) = _records(plog)
    assert record["status"] == "ok"
    assert record["output"] == "a_transparent.png"
    assert record["stages"][0]["stage"] == "s2_chroma_key"
    assert record["duration_ms"] >= 0
    assert not plog.active


def test_log_failure_records_stage_and_reason(plog, capsys):
    plog.start_image("b.png")
    plog.log_failure(DecodeFailure("Cannot read image"))

    (record,) = _records(plog)
    assert record["error"] == {
        "stage": "decode",
        "reason": "Cannot read image",
        "type": "DecodeFailure",
    }
    assert capsys.readouterr().out.count("ERROR:") == 1


def test_log_failure_stage_override_for_foreign_errors(plog):
    plog.start_image("c.png")
    try:
        raise TimeoutError("slow")
    except TimeoutError as e:
        plog.log_failure(e, stage="compositor")

    (record,) = _records(plog)
    assert record["error"]["stage"] == "compositor"
    assert record["error"]["reason"] == "slow"


def test_open_record_is_flushed_by_next_start(plog):
    plog.start_image("first.png")
    plog.start_image("second.png")
    plog.finish_image()

    first, second = _records(plog)
    assert first["image"] == "first.png"
    assert first["status"] == "running"
    assert second["image"] == "second.png"
    assert second["status"] == "ok"
