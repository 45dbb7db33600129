# tests/unit/core/test_unit_models.py — v1
"""Tests for core/models.py — Call, opaque tokens, outcomes."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from binboh.core.models import (
    Call,
    CallIdentity,
    Decision,
    ExecutionResult,
    FileDigest,
    MemoOutcome,
)


class TestCall:
    def test_create(self, tmp_path: Path):
        call = Call(
            working_directory=tmp_path,
            inputs=["a.txt", "b.txt"],
            outputs=["out.txt"],
            command=["echo", "hi"],
        )
        assert call.working_directory == str(tmp_path)
        assert call.inputs == ("a.txt", "b.txt")
        assert call.command == ("echo", "hi")

    def test_paths_accept_pathlike(self, tmp_path: Path):
        call = Call(working_directory=tmp_path, inputs=[Path("a.txt")], command=["true"])
        assert call.inputs == ("a.txt",)

    def test_relative_working_directory_rejected(self):
        with pytest.raises(ValidationError, match="absolute"):
            Call(working_directory="relative/dir", command=["true"])

    def test_empty_command_rejected(self, tmp_path: Path):
        with pytest.raises(ValidationError, match="command"):
            Call(working_directory=tmp_path, command=[])

    def test_frozen(self, tmp_path: Path):
        call = Call(working_directory=tmp_path, command=["true"])
        with pytest.raises(ValidationError):
            call.inputs = ("x",)  # type: ignore[misc]

    def test_structural_equality(self, tmp_path: Path):
        a = Call(working_directory=tmp_path, inputs=["x"], command=["true"])
        b = Call(working_directory=tmp_path, inputs=("x",), command=("true",))
        assert a == b
        assert hash(a) == hash(b)

    def test_order_matters(self, tmp_path: Path):
        a = Call(working_directory=tmp_path, inputs=["x", "y"], command=["true"])
        b = Call(working_directory=tmp_path, inputs=["y", "x"], command=["true"])
        assert a != b

    def test_resolve_relative_and_absolute(self, tmp_path: Path):
        call = Call(working_directory=tmp_path, command=["true"])
        assert call.resolve("data.json") == tmp_path / "data.json"
        assert call.resolve("/etc/hosts") == Path("/etc/hosts")

    def test_command_line_quotes(self, tmp_path: Path):
        call = Call(working_directory=tmp_path, command=["python3", "my script.py"])
        assert call.command_line == "python3 'my script.py'"

    def test_command_line_escapes_undecodable_bytes(self, tmp_path: Path):
        token = "tool-\udcff"
        call = Call(working_directory=tmp_path, command=[token])
        assert call.command == (token,)
        assert "\\udcff" in call.command_line
        call.command_line.encode("utf-8")


class TestFileDigest:
    def test_encode_decode(self):
        d = FileDigest(value=bytes(range(32)))
        assert FileDigest.decode(d.encode()) == d
        assert len(d.encode()) == 64

    def test_absent(self):
        d = FileDigest.absent()
        assert d.is_absent
        assert d.encode() == "absent"
        assert FileDigest.decode("absent") == d

    def test_absent_differs_from_any_content(self):
        assert FileDigest.absent() != FileDigest(value=b"\x00" * 32)

    def test_wrong_size_rejected(self):
        with pytest.raises(ValidationError, match="32 bytes"):
            FileDigest(value=b"short")

    def test_decode_garbage(self):
        with pytest.raises(ValueError):
            FileDigest.decode("not-hex")


class TestCallIdentity:
    def test_hex_round_trip(self):
        ident = CallIdentity(value=b"\xab" * 32)
        assert CallIdentity.from_hex(ident.hex()) == ident
        assert ident.short == "ab" * 6
        assert str(ident) == ident.hex()

    def test_not_equal_to_file_digest(self):
        raw = b"\x01" * 32
        assert CallIdentity(value=raw) != FileDigest(value=raw)

    def test_wrong_size_rejected(self):
        with pytest.raises(ValidationError):
            CallIdentity(value=b"\x01" * 16)


class TestExecutionResult:
    def test_success(self):
        assert ExecutionResult(exit_code=0).succeeded is True

    def test_failure(self):
        assert ExecutionResult(exit_code=3).succeeded is False

    def test_killed(self):
        assert ExecutionResult(exit_code=-9, signal=9).succeeded is False


class TestMemoOutcome:
    def _identity(self) -> CallIdentity:
        return CallIdentity(value=b"\x00" * 32)

    def test_skip_exit_code(self):
        o = MemoOutcome(identity=self._identity(), decision=Decision.SKIP, reason="unchanged")
        assert o.exit_code == 0

    def test_run_propagates_exit_code(self):
        o = MemoOutcome(
            identity=self._identity(), decision=Decision.RUN, reason="no_record",
            execution=ExecutionResult(exit_code=7),
        )
        assert o.exit_code == 7

    def test_signal_exit_code(self):
        o = MemoOutcome(
            identity=self._identity(), decision=Decision.RUN, reason="no_record",
            execution=ExecutionResult(exit_code=-15, signal=15),
        )
        assert o.exit_code == 143
