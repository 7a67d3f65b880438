"""Cache key generators for billing package."""


def subscription_by_user_key(user_id: int) -> str:
    """Generate cache key for subscription by user ID."""
    return f"user:{user_id}:subscription"
