import os
import stat
from pathlib import Path

import pytest

from capacity import CapacityGuard
from splitexceptions import InsufficientSpaceError, InvalidNamePatternError, PartSizeTooSmallError, SourceOpenFailureError, UnsupportedPartSizeError
from splitjob import GIGABYTE, MEGABYTE, MINIMUM_PART_SIZE, OperationMode, SplitJob
from splitworker import SplitState, SplitWorker


def test_ten_megabytes_in_three_megabyte_parts(tmp_path, make_file, payload, recorder, guard):
    data = payload(10 * MEGABYTE)
    source = make_file("video.bin", data)
    job = SplitJob(file_name=source, part_size=3 * MEGABYTE, destination_folder=str(tmp_path / "parts"))

    worker = SplitWorker(job, recorder.reporter(), guard)
    result = worker.doSplit()

    sizes = [os.path.getsize(part.file_name) for part in result.parts]
    assert sizes == [3 * MEGABYTE, 3 * MEGABYTE, 3 * MEGABYTE, MEGABYTE]
    assert [os.path.basename(part.file_name) for part in result.parts] == ["video_1(4).bin", "video_2(4).bin", "video_3(4).bin", "video_4(4).bin"]
    assert b"".join(Path(part.file_name).read_bytes() for part in result.parts) == data
    assert result.source_size == 10 * MEGABYTE
    assert worker.state == SplitState.SUCCEEDED
    assert (recorder.starts, recorder.finishes) == (1, 1)


def test_seven_lines_three_per_part(tmp_path, make_file, recorder, guard):
    source = make_file("notes.txt", b"1\n2\n3\n4\n5\n6\n7\n")
    job = SplitJob(file_name=source, part_size=3, operation_mode=OperationMode.LINES)

    result = SplitWorker(job, recorder.reporter(), guard).doSplit()

    assert [part.written for part in result.parts] == [3, 3, 1]
    assert [Path(part.file_name).read_bytes() for part in result.parts] == [b"1\n2\n3\n", b"4\n5\n6\n", b"7\n"]
    assert os.path.basename(result.parts[0].file_name) == "notes_1(0).txt"


def test_part_size_equal_to_source(tmp_path, make_file, payload, recorder, guard):
    data = payload(2 * MINIMUM_PART_SIZE)
    source = make_file("data.bin", data)
    job = SplitJob(file_name=source, part_size=len(data), destination_folder=str(tmp_path / "out"))

    result = SplitWorker(job, recorder.reporter(), guard).doSplit()

    assert len(result.parts) == 1
    assert Path(result.parts[0].file_name).read_bytes() == data


def test_rerun_gives_identical_parts(tmp_path, make_file, payload, recorder, guard):
    source = make_file("data.bin", payload(5 * MINIMUM_PART_SIZE + 77))
    job = SplitJob(file_name=source, part_size=MINIMUM_PART_SIZE + 10, destination_folder=str(tmp_path / "out"))

    first = SplitWorker(job, recorder.reporter(), guard).doSplit()
    first_bytes = [Path(part.file_name).read_bytes() for part in first.parts]
    second = SplitWorker(job, recorder.reporter(), guard).doSplit()

    assert [part.file_name for part in second.parts] == [part.file_name for part in first.parts]
    assert [Path(part.file_name).read_bytes() for part in second.parts] == first_bytes


def test_auto_pattern_pads_part_numbers(tmp_path, make_file, payload, recorder, guard):
    source = make_file("data.bin", payload(12 * MINIMUM_PART_SIZE))
    job = SplitJob(file_name=source, part_size=MINIMUM_PART_SIZE, destination_folder=str(tmp_path / "out"))

    result = SplitWorker(job, recorder.reporter(), guard).doSplit()

    assert os.path.basename(result.parts[0].file_name) == "data_01(12).bin"
    assert os.path.basename(result.parts[-1].file_name) == "data_12(12).bin"


def test_fat32_and_five_gigabytes_fails_before_writing(tmp_path, make_file, payload, recorder):
    source = make_file("data.bin", payload(1000))
    dest = tmp_path / "usb"
    job = SplitJob(file_name=source, part_size=5 * GIGABYTE, destination_folder=str(dest))
    fat32 = CapacityGuard(free_space_probe=lambda path: 1 << 50, format_probe=lambda path: "FAT32")

    worker = SplitWorker(job, recorder.reporter(), fat32)
    with pytest.raises(UnsupportedPartSizeError):
        worker.doSplit()

    assert not dest.exists()
    assert sorted(os.listdir(tmp_path)) == ["data.bin"]
    assert recorder.codes == ["ERROR_FILESYSTEM_NOTALLOW_SIZE"]
    assert worker.state == SplitState.FAILED
    assert (recorder.starts, recorder.finishes) == (1, 1)


def test_not_enough_space_fails_before_writing(tmp_path, make_file, payload, recorder):
    source = make_file("data.bin", payload(5000))
    job = SplitJob(file_name=source, part_size=MINIMUM_PART_SIZE)
    full_disk = CapacityGuard(free_space_probe=lambda path: 4999, format_probe=lambda path: None)

    with pytest.raises(InsufficientSpaceError):
        SplitWorker(job, recorder.reporter(), full_disk).doSplit()

    assert sorted(os.listdir(tmp_path)) == ["data.bin"]
    assert recorder.finishes == 1


def test_part_size_too_small(tmp_path, make_file, payload, recorder, guard):
    source = make_file("data.bin", payload(5000))
    job = SplitJob(file_name=source, part_size=MINIMUM_PART_SIZE - 1)

    with pytest.raises(PartSizeTooSmallError):
        SplitWorker(job, recorder.reporter(), guard).doSplit()
    assert sorted(os.listdir(tmp_path)) == ["data.bin"]


def test_missing_source(tmp_path, recorder, guard):
    job = SplitJob(file_name=str(tmp_path / "missing.bin"), part_size=MINIMUM_PART_SIZE)

    worker = SplitWorker(job, recorder.reporter(), guard)
    with pytest.raises(SourceOpenFailureError):
        worker.doSplit()
    assert recorder.codes == ["ERROR_OPENING_FILE"]
    assert (recorder.starts, recorder.finishes) == (1, 1)
    assert worker.state == SplitState.FAILED


def test_folder_is_not_a_source(tmp_path, recorder, guard):
    job = SplitJob(file_name=str(tmp_path), part_size=MINIMUM_PART_SIZE)
    with pytest.raises(SourceOpenFailureError):
        SplitWorker(job, recorder.reporter(), guard).doSplit()


def test_bad_pattern_fails_before_writing(tmp_path, make_file, payload, recorder, guard):
    source = make_file("data.bin", payload(3 * MINIMUM_PART_SIZE))
    job = SplitJob(file_name=source, part_size=MINIMUM_PART_SIZE, file_format_pattern="same.bin")

    with pytest.raises(InvalidNamePatternError):
        SplitWorker(job, recorder.reporter(), guard).doSplit()
    assert sorted(os.listdir(tmp_path)) == ["data.bin"]


def test_delete_original_after_success(tmp_path, make_file, payload, recorder, guard):
    source = make_file("data.bin", payload(3 * MINIMUM_PART_SIZE))
    job = SplitJob(file_name=source, part_size=MINIMUM_PART_SIZE, destination_folder=str(tmp_path / "out"), delete_original_file=True)

    result = SplitWorker(job, recorder.reporter(), guard).doSplit()

    assert result.source_deleted
    assert not os.path.exists(source)
    assert "INFO_SOURCE_DELETED" in recorder.codes


def test_read_only_original_is_kept(tmp_path, make_file, payload, recorder, guard):
    source = make_file("data.bin", payload(3 * MINIMUM_PART_SIZE))
    os.chmod(source, stat.S_IRUSR | stat.S_IRGRP | stat.S_IROTH)
    job = SplitJob(file_name=source, part_size=MINIMUM_PART_SIZE, destination_folder=str(tmp_path / "out"), delete_original_file=True)

    try:
        result = SplitWorker(job, recorder.reporter(), guard).doSplit()
    finally:
        os.chmod(source, stat.S_IRUSR | stat.S_IWUSR)

    assert not result.source_deleted
    assert os.path.exists(source)
    assert "WARN_SOURCE_READONLY" in recorder.codes


def test_original_kept_when_split_fails(tmp_path, make_file, payload, recorder):
    source = make_file("data.bin", payload(3 * MINIMUM_PART_SIZE))
    job = SplitJob(file_name=source, part_size=MINIMUM_PART_SIZE, delete_original_file=True)
    full_disk = CapacityGuard(free_space_probe=lambda path: 0, format_probe=lambda path: None)

    with pytest.raises(InsufficientSpaceError):
        SplitWorker(job, recorder.reporter(), full_disk).doSplit()
    assert os.path.exists(source)


def test_generation_log_lists_every_part(tmp_path, make_file, payload, recorder, guard):
    source = make_file("data.bin", payload(3 * MINIMUM_PART_SIZE))
    log = tmp_path / "generated.log"
    job = SplitJob(file_name=source, part_size=MINIMUM_PART_SIZE, destination_folder=str(tmp_path / "out"), generation_log_file=str(log))

    result = SplitWorker(job, recorder.reporter(), guard).doSplit()

    assert log.read_text(encoding="utf-8").splitlines() == [os.path.basename(part.file_name) for part in result.parts]


def test_nested_destination_is_created(tmp_path, make_file, payload, recorder, guard):
    source = make_file("data.bin", payload(MINIMUM_PART_SIZE))
    dest = tmp_path / "a" / "b"
    job = SplitJob(file_name=source, part_size=MINIMUM_PART_SIZE, destination_folder=str(dest))

    result = SplitWorker(job, recorder.reporter(), guard).doSplit()

    assert os.path.dirname(result.parts[0].file_name) == str(dest)


def test_job_is_frozen(tmp_path):
    job = SplitJob(file_name=str(tmp_path / "data.bin"), part_size=MINIMUM_PART_SIZE)
    with pytest.raises(Exception):
        job.part_size = 1


def test_parts_known_up_front_only_by_bytes(tmp_path):
    by_bytes = SplitWorker(SplitJob(file_name="x", part_size=10))
    by_lines = SplitWorker(SplitJob(file_name="x", part_size=10, operation_mode=OperationMode.LINES))
    assert by_bytes.parts(0) == 1
    assert by_bytes.parts(10) == 1
    assert by_bytes.parts(11) == 2
    assert by_lines.parts(11) == 0
