"""
Tests for the password generator
"""

import string

import pytest

from hireflow.utils.helpers import SYMBOLS, generate_password


class TestGeneratePassword:
    def test_default_length(self):
        assert len(generate_password()) == 12

    def test_custom_length(self):
        assert len(generate_password(20)) == 20

    def test_contains_every_character_class(self):
        for _ in range(50):
            password = generate_password()
            assert any(c in string.ascii_lowercase for c in password)
            assert any(c in string.ascii_uppercase for c in password)
            assert any(c in string.digits for c in password)
            assert any(c in SYMBOLS for c in password)

    def test_passwords_differ(self):
        assert len({generate_password() for _ in range(20)}) == 20

    def test_too_short(self):
        with pytest.raises(ValueError):
            generate_password(3)
