"""Base model shared by report and request data structures."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Immutable model; every report entity is built once per run."""

    model_config = ConfigDict(frozen=True)
