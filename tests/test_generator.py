"""
Tests for password generation and strength scoring.

Tests cover:
- Charset selection and the default alphabet fallback
- Class coverage over many draws
- Fixed scoring rubric, cap and monotonicity
- Strength labels
"""
import string

import pytest

from passwordx_vault.generator import (
    DEFAULT_ALPHABET,
    SYMBOLS,
    CharClasses,
    estimate_strength,
    generate_password,
    strength_label,
)

ALL_CLASSES = {"uppercase": True, "lowercase": True, "numbers": True, "symbols": True}
NO_CLASSES = {"uppercase": False, "lowercase": False, "numbers": False, "symbols": False}


class TestGeneratePassword:
    """Tests for generate_password."""

    @pytest.mark.parametrize("length", [1, 8, 16, 20, 64, 128])
    def test_length(self, length):
        assert len(generate_password(length)) == length

    def test_default_length(self):
        assert len(generate_password()) == 16

    def test_invalid_length(self):
        with pytest.raises(ValueError):
            generate_password(0)

    def test_all_classes_covered(self):
        for _ in range(50):
            password = generate_password(100, ALL_CLASSES)
            assert any(c in string.ascii_uppercase for c in password)
            assert any(c in string.ascii_lowercase for c in password)
            assert any(c in string.digits for c in password)
            assert any(c in SYMBOLS for c in password)

    def test_digits_only(self):
        password = generate_password(200, {**NO_CLASSES, "numbers": True})
        assert set(password) <= set(string.digits)

    def test_symbols_only(self):
        password = generate_password(200, CharClasses(
            uppercase=False, lowercase=False, numbers=False, symbols=True,
        ))
        assert set(password) <= set(SYMBOLS)

    def test_no_classes_falls_back_to_default_alphabet(self):
        password = generate_password(500, NO_CLASSES)
        assert set(password) <= set(DEFAULT_ALPHABET)
        assert DEFAULT_ALPHABET == (
            string.ascii_lowercase + string.ascii_uppercase + string.digits
        )

    def test_passwords_differ(self):
        passwords = {generate_password(20) for _ in range(50)}
        assert len(passwords) == 50

    def test_alphabet_union(self):
        classes = CharClasses(uppercase=True, lowercase=False, numbers=True, symbols=False)
        assert classes.alphabet() == string.ascii_uppercase + string.digits


class TestEstimateStrength:
    """Tests for estimate_strength."""

    @pytest.mark.parametrize("password, expected", [
        ("", 0),
        ("abc", 15),
        ("abcdefgh", 35),
        ("abcdefghijkl", 45),
        ("abcdefghijklmnop", 55),
        ("Abcdefgh", 50),
        ("Abcdefg1", 65),
        ("Abcdefg1!", 80),
        ("Abcdefghijk1!", 90),
        ("Abcdefghijklmn1!", 100),
        ("CorrectHorse1!", 90),
        ("12345678", 35),
        ("!!!!", 15),
        ("pässwort", 50),
        ("aaaaaa😀", 50),
    ])
    def test_rubric(self, password, expected):
        assert estimate_strength(password) == expected

    def test_length_counts_utf16_units(self):
        # One astral character is two UTF-16 units, so seven code points reach 8.
        assert estimate_strength("aaaaaa\U0001F600") == estimate_strength("aaaaaa\u00e9\u00e9")

    def test_capped_at_100(self):
        assert estimate_strength("Aa1!" * 50) == 100

    def test_deterministic(self):
        assert estimate_strength("Tr0ub4dor&3") == estimate_strength("Tr0ub4dor&3")

    def test_longer_never_scores_lower(self):
        base = "aB3$"
        scores = [estimate_strength(base * n) for n in range(1, 10)]
        assert scores == sorted(scores)

    def test_adding_class_never_scores_lower(self):
        steps = ["abcdefghij", "abcdefghijK", "abcdefghijK7", "abcdefghijK7#"]
        scores = [estimate_strength(p) for p in steps]
        assert scores == sorted(scores)

    def test_generated_password_is_strong(self):
        assert estimate_strength(generate_password(20, ALL_CLASSES)) >= 70


class TestStrengthLabel:
    """Tests for strength_label."""

    @pytest.mark.parametrize("score, label", [
        (0, "weak"),
        (39, "weak"),
        (40, "medium"),
        (69, "medium"),
        (70, "strong"),
        (100, "strong"),
    ])
    def test_thresholds(self, score, label):
        assert strength_label(score) == label
