"""Tests for utils/secret.py and utils/redact.py."""

from __future__ import annotations

import copy
import pickle

import pytest

from rbxupload.utils.redact import redact, scrub
from rbxupload.utils.secret import SecretString


class TestSecretString:
    def test_expose(self):
        assert SecretString("hunter2").expose_secret() == "hunter2"

    def test_renderings_are_masked(self):
        s = SecretString("hunter2")
        for text in (repr(s), str(s), f"{s}", f"{s:>20}", "%s" % s):
            assert "hunter2" not in text

    def test_repr_exact(self):
        assert repr(SecretString("x")) == "SecretString('**********')"

    def test_clear_zeroes_and_empties(self):
        s = SecretString("hunter2")
        s.clear()
        assert s.expose_secret() == ""
        assert len(s) == 0
        assert not s

    def test_equality_is_by_value(self):
        assert SecretString("a") == SecretString("a")
        assert SecretString("a") != SecretString("b")
        assert SecretString("a") != "a"

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(SecretString("a"))

    def test_cannot_be_pickled_or_copied(self):
        s = SecretString("a")
        with pytest.raises(TypeError):
            pickle.dumps(s)
        with pytest.raises(TypeError):
            copy.copy(s)
        with pytest.raises(TypeError):
            copy.deepcopy(s)

    def test_non_str_rejected(self):
        with pytest.raises(TypeError):
            SecretString(b"bytes")  # type: ignore[arg-type]

    def test_unicode_round_trip(self):
        assert SecretString("clé").expose_secret() == "clé"


class TestScrub:
    def test_replaces_every_occurrence(self):
        assert scrub("a SECRET b SECRET", "SECRET") == "a <redacted> b <redacted>"

    def test_no_secret_leaves_text(self):
        assert scrub("plain text", None) == "plain text"
        assert scrub("plain text", "") == "plain text"

    def test_cookie_assignment_masked_without_secret(self):
        assert scrub("Cookie: .ROBLOSECURITY=abc123; path=/") == "Cookie: .ROBLOSECURITY=<redacted>; path=/"

    def test_secret_inside_placeholder_uses_fallback(self):
        assert scrub("red", "red") == "***"

    def test_no_partial_leak(self):
        out = scrub("token=abcdefghij", "abcdefghij")
        assert "ghij" not in out


class TestRedact:
    def test_sensitive_keys(self):
        out = redact({"x-api-key": "k", "Cookie": "c", "X-CSRF-Token": "t", "name": "n"})
        assert out == {
            "x-api-key": "<redacted>",
            "Cookie": "<redacted>",
            "X-CSRF-Token": "<redacted>",
            "name": "n",
        }

    def test_bytes_summarised(self):
        assert redact({"body": b"\x89PNG1234"}) == {"body": "<binary:8_bytes>"}

    def test_nested_and_lists(self):
        out = redact({"a": [{"token": "x"}, "keep"], "b": {"c": ("s3cret",)}}, secret="s3cret")
        assert out == {"a": [{"token": "<redacted>"}, "keep"], "b": {"c": ["<redacted>"]}}

    def test_input_not_mutated(self):
        payload = {"Cookie": "c", "inner": {"password": "p"}}
        redact(payload)
        assert payload == {"Cookie": "c", "inner": {"password": "p"}}

    def test_secret_never_in_output(self):
        out = redact({"message": "echo SEKRIT", "list": ["SEKRIT"]}, secret="SEKRIT")
        assert "SEKRIT" not in repr(out)
