from pydantic import BaseModel, ConfigDict


class RouteDescriptor(BaseModel):
    """A single method and path pair currently registered on the application."""

    model_config = ConfigDict(frozen=True)

    method: str
    path: str
