"""Environment models."""

from pydantic import BaseModel, ConfigDict


class Environment(BaseModel):
    """A named table of variables, loaded once and swapped wholesale."""

    model_config = ConfigDict(frozen=True)

    name: str
    variables: dict[str, str] = {}
    file_path: str | None = None


class EnvParseError(BaseModel):
    line: int
    message: str


class EnvParseResult(BaseModel):
    environment: Environment | None = None
    errors: list[EnvParseError] = []

    @property
    def success(self) -> bool:
        return self.environment is not None and not self.errors
