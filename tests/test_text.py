"""
Unit tests for the APD text cleanup.
"""

import pytest

from apd_monitor.text import ENCODING_FIXES, clean_string, fix_encoding


class TestFixEncoding:
    """Test cases for fix_encoding."""

    @pytest.mark.parametrize(
        "corrupted, expected",
        [
            ("Ã¡", "á"),
            ("Ã©", "é"),
            ("Ã­", "í"),
            ("Ã³", "ó"),
            ("Ãº", "ú"),
            ("ÃÀ", "Á"),
            ("ÃÉ", "É"),
            ("ÃÍ", "Í"),
            ("ÃÓ", "Ó"),
            ("ÃÚ", "Ú"),
            ("Ã±", "ñ"),
            ("ÃÑ", "Ñ"),
            ("ÂÑ", "Ñ"),
            ("Ãñ", "ñ"),
            ("Ãí", "í"),
            ("Ãá", "á"),
            ("ÃÁ", "Á"),
            ("Â¡", "¡"),
            ("Â¿", "¿"),
            ("Ã¼", "ü"),
            ("Ãœ", "Ü"),
            ("Â°", "°"),
            ("º", "°"),
            ("Ã°", "°"),
            ("Ã‚Â°", "°"),
            ("Ã", ""),
            ("Â", ""),
        ],
    )
    def test_known_patterns(self, corrupted, expected):
        """Every known corrupted pattern maps to its accented character."""
        assert fix_encoding(corrupted) == expected

    def test_symbols_outside_allow_list_are_dropped(self):
        """Bullets, dashes and other symbols are repaired then stripped."""
        for wrong, _ in ENCODING_FIXES:
            if wrong.startswith("â"):
                assert fix_encoding(f"a{wrong}b") == "ab"

    def test_repairs_words_in_context(self):
        assert fix_encoding("EDUCACIÃ³N FÃ­SICA") == "EDUCACIóN FíSICA"
        assert fix_encoding("ESPAÃ±OL") == "ESPAñOL"
        assert fix_encoding("EES NÂ° 12") == "EES N° 12"

    def test_mixed_clean_and_corrupted_text(self):
        """A legit accent next to mojibake falls back to the substitution table."""
        assert fix_encoding("Matemática y FÃ­sica") == "Matemática y Física"

    def test_removes_replacement_character(self):
        assert fix_encoding("Educaci�n") == "Educacin"

    def test_drops_disallowed_characters(self):
        assert fix_encoding("Hola 😀 mundo™") == "Hola  mundo"
        assert fix_encoding("Zoë") == "Zo"

    def test_keeps_allowed_characters(self):
        text = "¿Dónde? ¡Aquí! Pingüino ÁÉÍÓÚÑ 20° <b>&"
        assert fix_encoding(text) == text

    @pytest.mark.parametrize(
        "value, expected",
        [("5A", "5 A"), ("12b", "12 b"), ("5 A", "5 A"), ("5AB", "5AB"), ("A5", "A5"), ("5A\n", "5A\n")],
    )
    def test_course_division_spacing(self, value, expected):
        assert fix_encoding(value) == expected

    @pytest.mark.parametrize("value", [None, "", 42, 3.5, ["Ã³"], {"a": 1}])
    def test_non_string_input_yields_empty(self, value):
        assert fix_encoding(value) == ""

    @pytest.mark.parametrize(
        "value",
        [
            "PROFESOR/A DE MATEMATICA",
            "Educación Física",
            "Año 2024 - Niñez",
            "¿Turno mañana?",
            "5 A",
            "Lunes: 08:00 a 10:00\nMartes: 10:00 a 12:00",
        ],
    )
    def test_idempotent_on_clean_input(self, value):
        assert fix_encoding(value) == value
        assert fix_encoding(fix_encoding(value)) == value


class TestCleanString:
    """Test cases for clean_string."""

    def test_trims_before_repairing(self):
        assert clean_string("  5A  ") == "5 A"

    def test_empty_and_missing(self):
        assert clean_string(None) == ""
        assert clean_string("   ") == ""
        assert clean_string(123) == ""
