import itertools
import string

import pytest

from gois.generator import (
    MAX_UINT64,
    expand_charset,
    generate_domains_from_pattern,
    load_domains_from_file,
)


def test_custom_charset_pattern_enumerates_in_order():
    stream, total = generate_domains_from_pattern("[abc]{2}.org")
    domains = list(stream)
    assert domains == [
        "aa.org", "ab.org", "ac.org",
        "ba.org", "bb.org", "bc.org",
        "ca.org", "cb.org", "cc.org",
    ]
    assert total == len(domains)


def test_prefix_with_digits():
    stream, total = generate_domains_from_pattern("test[0-9]{2}.net")
    domains = list(stream)
    assert total == len(domains) == len(set(domains))
    assert domains == sorted(domains)
    assert all(d.startswith("test") and d.endswith(".net") for d in domains)
    assert "test42.net" in domains


def test_several_segments_vary_last_fastest():
    stream, total = generate_domains_from_pattern("[ab][01].io")
    assert list(stream) == ["a0.io", "a1.io", "b0.io", "b1.io"]
    assert total == 4


def test_mixed_letters_and_digits():
    stream, total = generate_domains_from_pattern("[a-z]{2}[0-9].com")
    first = list(itertools.islice(stream, 3))
    assert first == sorted(first)
    assert len(set(first)) == 3
    assert all(d.endswith(".com") and d[2] in string.digits for d in first)
    assert total > len(first)


def test_stream_length_matches_count_for_three_letters():
    stream, total = generate_domains_from_pattern("[a-z]{3}.com")
    count = sum(1 for _ in stream)
    assert count == total


def test_zero_repeat_segment_disappears():
    stream, total = generate_domains_from_pattern("[ab]{0}x[cd].com")
    domains = list(stream)
    assert total == len(domains)
    assert all(d.startswith("x") and d.endswith(".com") for d in domains)
    assert {d[1] for d in domains} == set("cd")


def test_count_saturates():
    _, total = generate_domains_from_pattern("[0-9]{30}.com")
    assert total == MAX_UINT64


def test_pattern_without_charset_is_rejected():
    with pytest.raises(ValueError):
        generate_domains_from_pattern("example.com")


def test_pattern_with_only_zero_repeats_is_rejected():
    with pytest.raises(ValueError):
        generate_domains_from_pattern("[ab]{0}.com")


def test_pattern_with_reversed_range_is_rejected():
    with pytest.raises(ValueError):
        generate_domains_from_pattern("[z-a].com")


def test_expand_lowercase_range():
    assert expand_charset("a-z") == list(string.ascii_lowercase)


def test_expand_uppercase_and_digit_ranges():
    assert expand_charset("A-Z") == list(string.ascii_uppercase)
    assert expand_charset("0-9") == list(string.digits)


def test_expand_literal_characters():
    assert expand_charset("xyz") == list("xyz")


def test_expand_trailing_dash_is_literal():
    assert expand_charset("a-") == ["a", "-"]


def test_expand_combined_ranges():
    assert expand_charset("a-c0-2") == list("abc") + list("012")


def test_expand_reversed_range_is_rejected():
    with pytest.raises(ValueError):
        expand_charset("z-a")


def test_load_domains_skips_comments_and_blanks(tmp_path):
    path = tmp_path / "domains.txt"
    path.write_text("# list\nexample.com\n\n  example.org  \n#example.net\n", encoding="utf-8")
    assert load_domains_from_file(path) == ["example.com", "example.org"]


def test_load_domains_empty_file_is_rejected(tmp_path):
    path = tmp_path / "empty.txt"
    path.write_text("# nothing here\n\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_domains_from_file(path)


def test_load_domains_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_domains_from_file(tmp_path / "missing.txt")