"""Variable resolution for parsed requests.

Chain placeholders are substituted first, then environment placeholders.
The order matters: a chain placeholder such as ``{{login.response.body}}``
must never be read as a partial environment name.
"""

import logging

from reqbook.env.base import Environment
from reqbook.parser.base import ParsedRequest
from .chain import ChainResolver, ChainResponseStore
from .environment import EnvironmentResolver, validate_variables

logger = logging.getLogger(__name__)


class VariableResolutionEngine:
    """Resolves requests against one environment and one chain store.

    Both collaborators are fixed at construction; build a new engine after
    switching environments. The engine never mutates its inputs, so one
    instance can resolve many requests concurrently.
    """

    def __init__(
        self,
        environment: Environment | None = None,
        store: ChainResponseStore | None = None,
    ):
        self.environment = environment
        self.chain = ChainResolver(store)
        self.env_resolver = EnvironmentResolver(environment) if environment is not None else None

    def resolve(self, request: ParsedRequest) -> ParsedRequest:
        """Return a copy of request with url, header values and body resolved.

        Raises:
            ResolutionError: An environment variable is missing or cyclic.
        """
        logger.debug("Resolving variables for request %s", request.id)
        return request.model_copy(
            update={
                "url": self.resolve_text(request.url),
                "headers": {key: self.resolve_text(value) for key, value in request.headers.items()},
                "body": self.resolve_text(request.body) if request.body is not None else None,
            }
        )

    def resolve_text(self, text: str) -> str:
        resolved = self.chain.resolve(text)
        if self.env_resolver is None:
            logger.debug("No environment available for variable resolution")
            return resolved
        return self.env_resolver.resolve(resolved)

    def missing_variables(self, request: ParsedRequest) -> list[str]:
        """Environment names the request uses but the environment lacks."""
        texts = [request.url, *request.headers.values()]
        if request.body is not None:
            texts.append(request.body)
        missing: dict[str, None] = {}
        for text in texts:
            for name in validate_variables(text, self.environment):
                missing[name] = None
        return list(missing)
