import logging

import pytest

from bamkit.headers import merge_header_texts, read_group_id


@pytest.mark.parametrize(
    "line, expected",
    [
        ("@RG\tID:grp1\tSM:sample", "grp1"),
        ("@RG\tSM:sample\tID:grp2", "grp2"),
        ("@RG\tID:a:b\tSM:x", "a"),
        ("@RG\tSM:sample", ""),
        ("@RG\tID:", ""),
        ("@RG\tID", ""),
    ],
)
def test_read_group_id(line, expected):
    assert read_group_id(line) == expected


def test_first_file_contributes_hd_and_sq():
    first = "@HD\tVN:1.0\n@SQ\tSN:chr1\tLN:100\n@RG\tID:r1\n"
    second = "@HD\tVN:9.9\n@SQ\tSN:chrX\tLN:5\n@RG\tID:r2\n"
    merged = merge_header_texts([("a.bam", first), ("b.bam", second)])
    assert merged == (
        "@HD\tVN:1.0\n@SQ\tSN:chr1\tLN:100\n@RG\tID:r1\n@RG\tID:r2\n"
    )


def test_duplicate_read_groups_across_files_kept_once(caplog):
    first = "@RG\tID:r1\tSM:one\n"
    second = "@RG\tID:r1\tSM:two\n@RG\tID:r3\n"
    with caplog.at_level(logging.WARNING, logger="bamkit.headers"):
        merged = merge_header_texts([("a.bam", first), ("b.bam", second)])
    assert merged == "@RG\tID:r1\tSM:one\n@RG\tID:r3\n"
    assert caplog.records == []


def test_duplicate_read_group_within_file_warns(caplog):
    text = "@RG\tID:r1\n@RG\tID:r1\n"
    with caplog.at_level(logging.WARNING, logger="bamkit.headers"):
        merged = merge_header_texts([("only.bam", text)])
    assert merged == "@RG\tID:r1\n"
    assert len(caplog.records) == 1
    assert "only.bam" in caplog.records[0].getMessage()
    assert "r1" in caplog.records[0].getMessage()


def test_empty_first_header_means_no_hd_from_later_files():
    second = "@HD\tVN:1.0\n@RG\tID:r2\n"
    merged = merge_header_texts([("a.bam", ""), ("b.bam", second)])
    assert merged == "@RG\tID:r2\n"


def test_other_lines_and_blank_lines_dropped():
    text = "@HD\tVN:1.0\n\n@PG\tID:prog\n@CO\tcomment\n"
    assert merge_header_texts([("a.bam", text)]) == "@HD\tVN:1.0\n"


def test_no_sources_gives_empty_header():
    assert merge_header_texts([]) == ""


def test_merging_is_idempotent_for_single_file():
    text = "@HD\tVN:1.0\n@SQ\tSN:chr1\tLN:100\n@RG\tID:r1\n@RG\tID:r2\n"
    once = merge_header_texts([("a.bam", text)])
    assert once == text
    assert merge_header_texts([("a.bam", once)]) == once


def test_read_groups_without_id_share_empty_key():
    text = "@RG\tSM:one\n@RG\tSM:two\n"
    second = "@RG\tSM:three\n"
    merged = merge_header_texts([("a.bam", text), ("b.bam", second)])
    assert merged == "@RG\tSM:one\n"