from pydantic import BaseModel, ConfigDict

from .config import Profile
from .review import ReviewContext


class ReviewRequest(BaseModel):
    """Everything the provider client needs for one review call."""

    model_config = ConfigDict(frozen=True)

    context: ReviewContext
    profile: Profile
