import struct

import pytest

from mipscache.cli import build_parser, main


def itype(op, rs, rt, imm):
    return (op << 26) | (rs << 21) | (rt << 16) | (imm & 0xFFFF)


JR_RA = (31 << 21) | 0x08


@pytest.fixture
def program(tmp_path):
    path = tmp_path / "prog.bin"
    words = [itype(0x8, 0, 2, 7), JR_RA]
    path.write_bytes(b"".join(struct.pack(">I", w) for w in words))
    return path


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.program == "simple.bin"
    assert args.cache == "fully"
    assert args.quiet is False


def test_parser_rejects_unknown_cache():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--cache", "other"])


def test_quiet_run_prints_report(program, capsys):
    assert main([str(program), "--quiet"]) == 0
    out = capsys.readouterr().out
    assert f"Final return value Regs[2]: 0x{7:x}" in out
    assert "@ 0x" not in out


def test_trace_run_prints_instructions(program, capsys):
    assert main([str(program)]) == 0
    out = capsys.readouterr().out
    assert "@ 0x0 " in out
    assert "Total cycle num:" in out


def test_direct_cache_gives_same_result(program, capsys):
    assert main([str(program), "--cache", "direct", "-q"]) == 0
    out = capsys.readouterr().out
    assert f"Final return value Regs[2]: 0x{7:x}" in out


def test_bad_line_count_is_rejected(program):
    with pytest.raises(SystemExit):
        main([str(program), "--cache", "direct", "--lines", "3"])


def test_missing_file_fails(tmp_path, capsys):
    assert main([str(tmp_path / "absent.bin")]) == 1
    assert "file open error" in capsys.readouterr().err