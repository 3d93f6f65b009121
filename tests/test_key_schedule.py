import sys
from pathlib import Path

import pytest

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from xr30lab.cipher.builder import key_schedule
from xr30lab.cipher.errors import InvalidLength
from xr30lab.cipher.key_schedule import ScheduledKey, derive, mixing_vector
from xr30lab.cipher.register import Register

KEY_WORDS = (0xA59535D07E192F12, 0x82734FB3084C5E05, 0x385B8A038D28E669, 0xD2BC44A82C395D8E)

EXPECTED_SUBKEYS = (
    (0xC46290D1A684D639, 0xDF434310B8AA520F, 0x4CCD68BFEECB2918, 0xA56452519A218336),
    (0xB4D09E77E9820EC4, 0x91796040DD2E7C51, 0x39BA6B64AAD67C6D, 0x49D50BCAB40007EE),
    (0x9BC35431EB60DA5A, 0x23BCE49D10364266, 0xEA00761149E29977, 0xCDAE3DCC8C6CEF9B),
    (0x275B6FCD4B88549F, 0x02A3279BCB5A15D3, 0x4E69A8D916965A5A, 0x72DF7E7A2B5468C5),
)


def test_reference_key_subkeys():
    skey = derive(KEY_WORDS)
    assert tuple(k.words for k in skey) == EXPECTED_SUBKEYS


def test_key_representations_give_same_schedule():
    from_words = key_schedule(KEY_WORDS)
    from_bytes = key_schedule(Register(KEY_WORDS).to_bytes())
    from_register = key_schedule(Register(KEY_WORDS))
    assert from_words == from_bytes == from_register


def test_small_key_first_subkey():
    skey = derive((1, 2, 3, 4))
    assert skey.k1 == Register((0xF3054F8EE04EFEF0, 0x6CF3856DC9811413, 0xB11FDCFE4D9703FA, 0x809D76153846E368))


def test_mixing_vector_keeps_own_word():
    # limb i of vector j is kj + kj*ki, limb j is kj. Keep this operand order:
    # ki + ki*kj gives different subkeys and breaks the reference ciphertext.
    assert mixing_vector((1, 2, 3, 4), 0) == Register((1, 3, 4, 5))
    assert mixing_vector((1, 2, 3, 4), 1) == Register((4, 2, 8, 10))
    assert mixing_vector((1, 2, 3, 4), 3) == Register((8, 12, 16, 4))


def test_mixing_vector_wraps_modulo_word():
    big = 0xFFFFFFFFFFFFFFFF
    vec = mixing_vector((big, 2, 0, 0), 0)
    assert vec.limbs == (big, (big + big * 2) & big, big, big)


def test_zero_key_gives_zero_subkeys():
    skey = derive((0, 0, 0, 0))
    assert all(k == Register.zero() for k in skey)


def test_schedule_is_deterministic():
    assert derive(KEY_WORDS) == derive(KEY_WORDS)
    assert derive(KEY_WORDS) != derive((KEY_WORDS[0] ^ 1,) + KEY_WORDS[1:])


def test_decryption_order_is_reversed():
    skey = derive(KEY_WORDS)
    assert skey.encryption_order() == (skey.k1, skey.k2, skey.k3, skey.k4)
    assert skey.decryption_order() == (skey.k4, skey.k3, skey.k2, skey.k1)
    assert isinstance(skey, ScheduledKey)


@pytest.mark.parametrize("key", [bytes(31), bytes(33), (1, 2, 3), (1, 2, 3, 4, 5), (1 << 64, 0, 0, 0), (0, 0, 0, -1)])
def test_wrong_key_length(key):
    with pytest.raises(InvalidLength) as excinfo:
        key_schedule(key)
    assert excinfo.value.what == "key"
