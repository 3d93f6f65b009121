"""XR30256: an experimental 256-bit block cipher built on rule-30 cellular automata.

Research / education only. Do NOT use in production.
"""
from xr30lab.cipher.automaton import CA256, evolve, step
from xr30lab.cipher.builder import (
    CipherContext,
    XR30256Cipher,
    build_cipher,
    decrypt_block,
    encrypt_block,
    key_schedule,
)
from xr30lab.cipher.errors import AllocationFailure, InvalidLength, XR30Error
from xr30lab.cipher.feistel import ROUNDS
from xr30lab.cipher.key_schedule import ScheduledKey
from xr30lab.cipher.register import Register
from xr30lab.cipher.rules import RULE10, RULE30, RULE90, RULE110, RuleTable
from xr30lab.cipher.spec import CipherSpec

__version__ = "0.1.0"

__all__ = [
    "CA256",
    "ROUNDS",
    "evolve",
    "step",
    "key_schedule",
    "encrypt_block",
    "decrypt_block",
    "CipherContext",
    "XR30256Cipher",
    "build_cipher",
    "CipherSpec",
    "ScheduledKey",
    "Register",
    "RuleTable",
    "RULE30",
    "RULE110",
    "RULE90",
    "RULE10",
    "XR30Error",
    "InvalidLength",
    "AllocationFailure",
]
