from pydantic import BaseModel, ConfigDict, PositiveInt


class AuthenticatedUser(BaseModel):
    """Caller identity as asserted by the gateway. Immutable for the request."""

    model_config = ConfigDict(frozen=True)

    user_id: PositiveInt
