"""Deployment state of LBaaS objects."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_serializer


class State(BaseModel):
    """Deployment state as returned by the engine.

    Requests carry only the state id, so State serializes to its id.
    """

    id: str = Field("", description="Programmatically usable enum value")
    text: str = Field("", description="Human readable state text")
    type: int = 0

    @model_serializer
    def _serialize(self) -> str:
        return self.id

    def state_success(self) -> bool:
        """Whether the state is one of the successful ones."""
        return self.id in (UPDATED.id, DEPLOYED.id)

    def state_progressing(self) -> bool:
        """Whether a change is currently being applied."""
        return self.id in (UPDATING.id, NEWLY_CREATED.id)

    def state_failure(self) -> bool:
        return self.id == DEPLOYMENT_ERROR.id


UPDATING = State(id="0", text="Updating", type=0)
UPDATED = State(id="1", text="Updated", type=1)
DEPLOYMENT_ERROR = State(id="2", text="DeploymentError", type=2)
DEPLOYED = State(id="3", text="Deployed", type=3)
NEWLY_CREATED = State(id="4", text="NewlyCreated", type=4)


class HasState(BaseModel):
    """Base for LBaaS objects carrying a deployment state."""

    state: State = Field(default_factory=State)

    def state_success(self) -> bool:
        return self.state.state_success()

    def state_progressing(self) -> bool:
        return self.state.state_progressing()

    def state_failure(self) -> bool:
        return self.state.state_failure()
