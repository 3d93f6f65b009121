from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class CipherSpec(BaseModel):
    """A *research* parameterization of the CA Feistel construction.

    The defaults describe XR30256 exactly. Changing the rule, the number
    of rounds or the CA generations gives variants that still decrypt
    correctly (invertibility comes from the Feistel structure) but are
    NOT XR30256 and carry no security claim whatsoever.
    """

    name: str = Field(default="XR30256", min_length=3, max_length=80)
    rule: int = Field(default=30, ge=0, le=255, description="Wolfram rule number of the round CA")
    rounds: int = Field(default=16, ge=1, le=64)
    generations: int = Field(default=255, ge=0, le=4096, description="CA generations per round function")
    key_generations: int = Field(default=255, ge=0, le=4096, description="CA generations per subkey")

    block_size_bits: int = Field(default=256, description="Fixed by the register width")
    key_size_bits: int = Field(default=256, description="Fixed by the register width")

    version: str = Field(default="0.1")
    notes: str = Field(default="")
    seed: int = Field(default=1337, description="Used for deterministic test vectors")

    @field_validator("block_size_bits", "key_size_bits")
    @classmethod
    def _fixed_width(cls, v: int) -> int:
        if v != 256:
            raise ValueError("XR30256 keys and blocks are exactly 256 bits")
        return v

    @property
    def is_reference(self) -> bool:
        """True when the parameters are those of XR30256 itself."""
        return (self.rule, self.rounds, self.generations, self.key_generations) == (30, 16, 255, 255)
