"""Pydantic models for validator balance aggregation."""

from pydantic import BaseModel, ConfigDict, Field


class ValidatorState(BaseModel):
    """Validator index and balance at a slot, as reported by the beacon node."""

    index: int = Field(..., ge=0, description="Validator index on chain")
    balance: int = Field(..., ge=0, description="Balance in Gwei")


class WithdrawalTotal(BaseModel):
    """Total withdrawals of one validator, as reported by the explorer."""

    index: int = Field(..., ge=0, alias="validatorindex", description="Validator index")
    total_withdrawal_gwei: int = Field(
        ..., ge=0, alias="sum", description="Sum of withdrawals in Gwei"
    )

    model_config = ConfigDict(populate_by_name=True)


class ValidatorRecord(BaseModel):
    """One row of a committed snapshot."""

    public_key: str = Field(..., description="Validator public key")
    chain_index: int = Field(..., ge=0, description="Validator index on chain")
    balance_gwei: int = Field(..., ge=0, description="Balance in Gwei")
    withdrawal_gwei: int = Field(default=0, ge=0, description="Total withdrawals in Gwei")

    model_config = ConfigDict(frozen=True)


class CycleOutcome(BaseModel):
    """Per-validator enrichment counters for one cycle."""

    succeeded: int = 0
    failed: int = 0


type Snapshot = tuple[ValidatorRecord, ...]


__all__ = [
    "CycleOutcome",
    "Snapshot",
    "ValidatorRecord",
    "ValidatorState",
    "WithdrawalTotal",
]
