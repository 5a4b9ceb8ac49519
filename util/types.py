from typing import Literal


# Flow: Narrow types for batch lifecycles.
BatchStatus = Literal["pending", "processing", "completed", "failed"]
ItemStatus = Literal["pending", "completed", "failed"]

SubscriptionTier = Literal["free", "monthly", "quarterly", "biannual", "annual"]
SubscriptionStatus = Literal["active", "paused", "suspended"]
