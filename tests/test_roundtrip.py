import sys
from pathlib import Path

import pytest

# Ensure project root is on path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from xr30lab.cipher.builder import (
    CipherContext,
    build_cipher,
    decrypt_block,
    encrypt_block,
    key_schedule,
)
from xr30lab.cipher.errors import InvalidLength
from xr30lab.cipher.feistel import round_function, run_network
from xr30lab.cipher.register import Register
from xr30lab.cipher.rules import RULE90, RULE110
from xr30lab.cipher.spec import CipherSpec
from xr30lab.evaluation.roundtrip import run_all_rules, run_roundtrip_tests

KEY_WORDS = (0xA59535D07E192F12, 0x82734FB3084C5E05, 0x385B8A038D28E669, 0xD2BC44A82C395D8E)
PT_WORDS = (0x0101010101010101, 0x0202020202020202, 0x0303030303030303, 0x0404040404040404)
CT_WORDS = (0xFFE65120E48FC4F6, 0x8858C7277ABEFE8F, 0xAFB3A61728DF176E, 0x81075D7C09517A42)


@pytest.fixture(scope="module")
def reference_key():
    return key_schedule(KEY_WORDS)


# ---------------------------------------------------------------------------
# Reference vector
# ---------------------------------------------------------------------------

def test_reference_ciphertext(reference_key):
    assert encrypt_block(reference_key, PT_WORDS) == CT_WORDS


def test_reference_decrypt(reference_key):
    assert decrypt_block(reference_key, CT_WORDS) == PT_WORDS


def test_small_key_ciphertext():
    skey = key_schedule((1, 2, 3, 4))
    ct = encrypt_block(skey, PT_WORDS)
    assert ct == (0xF0A9B544E5C485B1, 0x0005D162F26EE34C, 0x2229EE908983C691, 0x013F8AE6C193708D)
    assert decrypt_block(skey, ct) == PT_WORDS


def test_zero_key_zero_block_is_zero():
    skey = key_schedule(bytes(32))
    assert encrypt_block(skey, bytes(32)) == bytes(32)


# ---------------------------------------------------------------------------
# Representations
# ---------------------------------------------------------------------------

def test_bytes_in_bytes_out(reference_key):
    pt = Register(PT_WORDS).to_bytes()
    ct = encrypt_block(reference_key, pt)
    assert isinstance(ct, bytes)
    assert ct == Register(CT_WORDS).to_bytes()
    assert decrypt_block(reference_key, ct) == pt


def test_register_in_register_out(reference_key):
    ct = encrypt_block(reference_key, Register(PT_WORDS))
    assert ct == Register(CT_WORDS)


def test_list_in_words_out(reference_key):
    assert encrypt_block(reference_key, list(PT_WORDS)) == CT_WORDS


def test_builder_adapter_matches_module_api():
    cipher = build_cipher()
    key = Register(KEY_WORDS).to_bytes()
    pt = Register(PT_WORDS).to_bytes()
    ct = cipher.encrypt_block(pt, key)
    assert ct == Register(CT_WORDS).to_bytes()
    assert cipher.decrypt_block(ct, key) == pt


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("block", [bytes(31), bytes(33), (1, 2, 3), (1, 2, 3, 1 << 64)])
def test_wrong_block_length(reference_key, block):
    with pytest.raises(InvalidLength) as excinfo:
        encrypt_block(reference_key, block)
    assert excinfo.value.what == "plaintext"

    with pytest.raises(InvalidLength) as excinfo:
        decrypt_block(reference_key, block)
    assert excinfo.value.what == "ciphertext"


def test_unsupported_block_type(reference_key):
    with pytest.raises(TypeError):
        encrypt_block(reference_key, "not a block")


def test_network_argument_checks(reference_key):
    block = Register(PT_WORDS)
    with pytest.raises(ValueError):
        run_network(block, reference_key.subkeys[:3])
    with pytest.raises(ValueError):
        run_network(block, reference_key.subkeys, rounds=0)


def test_round_function_is_folded_ca():
    assert round_function((0, 0), Register.zero()) == (0, 0)
    # no generations: (V || V) ^ K folds to the fold of K alone
    subkey = Register(KEY_WORDS)
    assert round_function((123, 456), subkey, generations=0) == subkey.fold()


# ---------------------------------------------------------------------------
# Variants still invert
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("rounds,rule_table,generations", [
    (1, None, 255),
    (4, RULE90, 32),
    (2, RULE110, 16),
    (3, None, 0),
])
def test_variant_roundtrip(rounds, rule_table, generations):
    kwargs = {"rounds": rounds, "generations": generations}
    if rule_table is not None:
        kwargs["rule_table"] = rule_table
    ctx = CipherContext.from_key(KEY_WORDS, key_generations=generations, **kwargs)
    ct = ctx.encrypt(PT_WORDS)
    assert ctx.decrypt(ct) == PT_WORDS


def test_run_roundtrip_tests_reference():
    result = run_roundtrip_tests(CipherSpec(), num_vectors=3, seed=1337)
    assert result.is_perfect, result.summary()
    assert result.total_vectors == 3
    assert result.success_rate == 1.0
    assert "PASS" in result.summary()


def test_run_all_rules_short():
    base = CipherSpec(rounds=1, generations=8, key_generations=8)
    results = run_all_rules(base, num_vectors=2, seed=7)
    assert [r.rule for r in results] == [10, 30, 90, 110]
    assert all(r.is_perfect for r in results)
    assert results[1].algorithm_name == "XR30256-rule30"
