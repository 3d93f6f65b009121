import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from xr30lab.cli import main

KEY_HEX = "a59535d07e192f1282734fb3084c5e05385b8a038d28e669d2bc44a82c395d8e"
PT_HEX = "0101010101010101020202020202020203030303030303030404040404040404"
CT_HEX = "ffe65120e48fc4f68858c7277abefe8fafb3a61728df176e81075d7c09517a42"


def test_encrypt_hex(capsys):
    assert main(["encrypt", "--key", KEY_HEX, "--hex", PT_HEX]) == 0
    assert capsys.readouterr().out.strip() == CT_HEX


def test_decrypt_hex(capsys):
    assert main(["decrypt", "--key", KEY_HEX, "--hex", CT_HEX]) == 0
    assert capsys.readouterr().out.strip() == PT_HEX


def test_encrypt_file_roundtrip(tmp_path):
    src = tmp_path / "pt.bin"
    enc = tmp_path / "ct.bin"
    dec = tmp_path / "rt.bin"
    src.write_bytes(bytes.fromhex(PT_HEX))

    assert main(["encrypt", "--key", KEY_HEX, "--in", str(src), "--out", str(enc)]) == 0
    assert enc.read_bytes() == bytes.fromhex(CT_HEX)
    assert main(["decrypt", "--key", KEY_HEX, "--in", str(enc), "--out", str(dec)]) == 0
    assert dec.read_bytes() == src.read_bytes()


def test_schedule_prints_subkeys(capsys):
    assert main(["schedule", "--key", KEY_HEX]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "K1: c46290d1a684d639df434310b8aa520f4ccd68bfeecb2918a56452519a218336"
    assert len(lines) == 4


def test_schedule_binary(capsys):
    assert main(["schedule", "--key", KEY_HEX, "--binary"]) == 0
    first = capsys.readouterr().out.splitlines()[0]
    assert len(first.split(": ")[1]) == 256


def test_keygen_seed_is_reproducible(capsys):
    main(["keygen", "--seed", "5"])
    first = capsys.readouterr().out.strip()
    main(["keygen", "--seed", "5"])
    assert capsys.readouterr().out.strip() == first
    assert len(first) == 64


def test_evolve(capsys):
    start = "0123456789abcdeffedcba98765432108000000000000001" "0000000000000001"
    assert main(["evolve", "--hex", start, "--generations", "1"]) == 0
    assert capsys.readouterr().out.strip() == (
        "83f66d5c5f2a39080093a2f4c5d66f39c0000000000000038000000000000003"
    )


def test_evolve_trace(capsys):
    assert main(["evolve", "--hex", "80" + "00" * 31, "--generations", "2", "--trace"]) == 0
    rows = capsys.readouterr().out.splitlines()
    assert len(rows) == 3
    assert rows[0].startswith("#")
    assert rows[1].count("#") == 3


def test_short_key_exits_2(capsys):
    assert main(["encrypt", "--key", "abcd", "--hex", PT_HEX]) == 2
    assert "key must be exactly 256 bits" in capsys.readouterr().err


def test_bad_hex_exits_2(capsys):
    assert main(["encrypt", "--key", "zz" * 32, "--hex", PT_HEX]) == 2
    assert "error:" in capsys.readouterr().err


def test_missing_block_exits_2(capsys):
    assert main(["encrypt", "--key", KEY_HEX]) == 2
    assert "--hex or --in" in capsys.readouterr().err


def test_unreadable_input_exits_1(tmp_path, capsys, caplog):
    missing = tmp_path / "absent.bin"
    with caplog.at_level("ERROR"):
        assert main(["encrypt", "--key", KEY_HEX, "--in", str(missing)]) == 1
    assert "error:" in capsys.readouterr().err
    assert any(record.levelname == "ERROR" for record in caplog.records)
