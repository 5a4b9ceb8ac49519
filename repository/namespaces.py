from typing import Final

ROOT: Final[str] = "plagzap"

BATCHES: Final[str] = f"{ROOT}:batches"
OWNER_BATCHES: Final[str] = f"{BATCHES}:owner"  # per-owner set of batch ids
USAGE: Final[str] = f"{ROOT}:usage"
