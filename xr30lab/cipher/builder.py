from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from . import feistel
from .automaton import CA256
from .feistel import ROUNDS
from .key_schedule import ScheduledKey, derive
from .register import BlockLike, as_register, like
from .registry import RuleRegistry
from .rules import RULE30, RuleTable
from .spec import CipherSpec


class BlockCipher:
    def encrypt_block(self, plaintext_block: bytes, key: bytes) -> bytes:  # pragma: no cover
        raise NotImplementedError

    def decrypt_block(self, ciphertext_block: bytes, key: bytes) -> bytes:  # pragma: no cover
        raise NotImplementedError


def key_schedule(key: BlockLike) -> ScheduledKey:
    """Derive the four XR30256 subkeys from a 256-bit master key.

    Raises:
        InvalidLength: if `key` is not exactly 256 bits.
    """
    return derive(as_register(key, what="key").words)


def encrypt_block(scheduled_key: ScheduledKey, plaintext: BlockLike) -> BlockLike:
    """Encrypt one 256-bit block; the result has the same type as `plaintext`.

    Raises:
        InvalidLength: if `plaintext` is not exactly 256 bits.
    """
    block = as_register(plaintext, what="plaintext")
    return like(plaintext, feistel.encrypt(block, scheduled_key))


def decrypt_block(scheduled_key: ScheduledKey, ciphertext: BlockLike) -> BlockLike:
    """Decrypt one 256-bit block; the result has the same type as `ciphertext`.

    Raises:
        InvalidLength: if `ciphertext` is not exactly 256 bits.
    """
    block = as_register(ciphertext, what="ciphertext")
    return like(ciphertext, feistel.decrypt(block, scheduled_key))


@dataclass(frozen=True)
class CipherContext:
    """A scheduled key bundled with the round count and the CA rule.

    Immutable, so one context can be shared between threads.
    """
    scheduled_key: ScheduledKey
    rounds: int = ROUNDS
    rule_table: RuleTable = RULE30
    generations: int = CA256

    @classmethod
    def from_key(
        cls,
        key: BlockLike,
        *,
        rounds: int = ROUNDS,
        rule_table: RuleTable = RULE30,
        generations: int = CA256,
        key_generations: int = CA256,
    ) -> "CipherContext":
        words = as_register(key, what="key").words
        return cls(
            scheduled_key=derive(words, rule_table, key_generations),
            rounds=rounds,
            rule_table=rule_table,
            generations=generations,
        )

    def encrypt(self, plaintext: BlockLike) -> BlockLike:
        block = as_register(plaintext, what="plaintext")
        out = feistel.encrypt(
            block, self.scheduled_key,
            rounds=self.rounds, rule_table=self.rule_table, generations=self.generations,
        )
        return like(plaintext, out)

    def decrypt(self, ciphertext: BlockLike) -> BlockLike:
        block = as_register(ciphertext, what="ciphertext")
        out = feistel.decrypt(
            block, self.scheduled_key,
            rounds=self.rounds, rule_table=self.rule_table, generations=self.generations,
        )
        return like(ciphertext, out)


@dataclass
class XR30256Cipher(BlockCipher):
    """Key-per-call adapter used by the evaluation harness."""
    spec: CipherSpec
    rule_table: RuleTable

    def context(self, key: BlockLike) -> CipherContext:
        return CipherContext.from_key(
            key,
            rounds=self.spec.rounds,
            rule_table=self.rule_table,
            generations=self.spec.generations,
            key_generations=self.spec.key_generations,
        )

    def encrypt_block(self, plaintext_block: bytes, key: bytes) -> bytes:
        return self.context(key).encrypt(plaintext_block)

    def decrypt_block(self, ciphertext_block: bytes, key: bytes) -> bytes:
        return self.context(key).decrypt(ciphertext_block)


def build_cipher(spec: Optional[CipherSpec] = None, registry: Optional[RuleRegistry] = None) -> XR30256Cipher:
    spec = spec or CipherSpec()
    reg = registry or RuleRegistry()
    return XR30256Cipher(spec=spec, rule_table=reg.get(spec.rule))
