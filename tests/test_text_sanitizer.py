from __future__ import annotations

import datetime as dt
import random

import pytest

from dispatch_reports import labels
from dispatch_reports.text import (
    display_value,
    ellipsize,
    fold,
    font_safe,
    format_date,
    format_datetime,
    parse_datetime,
    sanitize,
    wrap,
)


def _chars(value: str) -> float:
    return float(len(value))


def test_sanitize_strips_controls_and_invisible_characters():
    raw = "  Olá\r\nmundo\x00\u200b\t!\ufeff "
    assert sanitize(raw) == "Olá\nmundo !"


def test_sanitize_normalizes_to_composed_form():
    assert sanitize("e\u0301") == "\u00e9"
    assert sanitize(None) == ""
    assert sanitize(42) == "42"


def test_sanitize_keeps_plain_text_untouched():
    text = "Rua das Flores, 120 - Bloco B"
    assert sanitize(text) == text


_STRIPPED = (
    [chr(c) for c in range(0x00, 0x20) if chr(c) not in "\t\n\r"]
    + [chr(c) for c in range(0x7F, 0xA0)]
    + ["\u200b", "\u200c", "\u200d", "\u2060", "\ufeff", "\ufffd"]
)
_ALPHABET = _STRIPPED + list("ab Zé\t\r\n") + ["e\u0301", "ç", "\u2713", "  "]


@pytest.mark.parametrize("char", ["\x00", "\x1b", "\x7f", "\x85", "\x9f", "\u2060", "\ufffd", "\ufeff"])
def test_sanitize_drops_control_and_invisible_classes(char):
    assert sanitize(f"Leitura{char} 220V{char}") == "Leitura 220V"


@pytest.mark.parametrize(
    "raw",
    ["\r\n\x85 Relé\u2060 ok \t\x1b", "e\u200b\u0301", "a\r\x00\nb", "\ufeff\ufeff", "  \t ", "Ordem\u200d 42\x9f"],
)
def test_sanitize_is_idempotent_on_dirty_samples(raw):
    once = sanitize(raw)
    assert sanitize(once) == once


def test_sanitize_random_inputs_are_stable_and_clean():
    rng = random.Random(20240305)
    for _ in range(2000):
        raw = "".join(rng.choice(_ALPHABET) for _ in range(rng.randint(0, 24)))
        once = sanitize(raw)
        assert sanitize(once) == once
        assert not any(ch in once for ch in _STRIPPED)
        assert "\r" not in once and "\t" not in once
        assert once == once.strip()


def test_fold_removes_accents_and_case():
    assert fold("Técnico") == "tecnico"
    assert fold("  ADMINISTRADOR ") == "administrador"


def test_font_safe_replaces_unencodable_glyphs():
    assert font_safe("ok \u2713") == "ok v"
    assert font_safe("ação") == "ação"


def test_wrap_greedy_lines_fit_width():
    assert wrap("aaa bbb ccc", 7, _chars) == ["aaa bbb", "ccc"]


def test_wrap_breaks_words_wider_than_column():
    assert wrap("abcdefghij", 4, _chars) == ["abcd", "efgh", "ij"]


def test_wrap_keeps_paragraph_breaks_and_never_returns_empty():
    assert wrap("a\n\nb", 10, _chars) == ["a", "", "b"]
    assert wrap("", 10, _chars) == [""]
    assert wrap(None, 10, _chars) == [""]


def test_ellipsize_truncates_with_suffix():
    assert ellipsize("abcdefghij", 6, _chars) == "abc..."
    assert ellipsize("abc", 6, _chars) == "abc"


def test_display_value_placeholder_and_lists():
    assert display_value(None) == labels.NOT_INFORMED
    assert display_value("   ") == labels.NOT_INFORMED
    assert display_value(["Ana", " ", "Bruno"]) == "Ana, Bruno"
    assert display_value("", placeholder="-") == "-"


def test_date_formatting():
    assert format_date("2024-03-05T10:00:00Z") == "05/03/2024"
    assert format_date("05/03/2024") == "05/03/2024"
    assert format_date("garbage") == labels.INVALID_DATE
    assert format_date(None) == labels.NOT_INFORMED
    assert format_datetime("2024-03-05 14:30") == "05/03/2024 14:30"
    assert parse_datetime(dt.date(2024, 1, 2)) == dt.datetime(2024, 1, 2)
