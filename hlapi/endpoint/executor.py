"""Request execution.

Evaluates a composed, argument-bound script inside the three ambient scopes
scripts expect (request, response and result accumulator), and converts the
accumulated result into response content.
"""

import logging
from typing import Any, Callable, Mapping, Optional

from hlapi.constants import Scopes
from hlapi.core.node import Node
from hlapi.signals import Signaler, SlotRegistry

from .models import EndpointRequest, EndpointResponse
from .negotiation import dispose, to_content

logger = logging.getLogger(__name__)

Negotiator = Callable[[EndpointResponse, Node], Any]


class RequestExecutor:
    """Executes scripts on behalf of a single request.

    Every call gets its own signaler, so concurrent dispatches never share
    scope state.
    """

    def __init__(
        self,
        registry: SlotRegistry,
        services: Optional[Mapping[str, Any]] = None,
        negotiator: Negotiator = to_content,
    ) -> None:
        """Initialize the executor.

        Args:
            registry: Slots available to scripts
            services: Dispatcher services exposed to slots
            negotiator: Converts the result accumulator into response content
        """
        self.registry = registry
        self.services = dict(services or {})
        self.negotiator = negotiator

    def create_signaler(self) -> Signaler:
        """Create a fresh signaler for one dispatch."""
        return Signaler(self.registry, self.services)

    async def execute(
        self,
        script: Node,
        request: EndpointRequest,
        response: Optional[EndpointResponse] = None,
    ) -> EndpointResponse:
        """Evaluate a script and build its response.

        Args:
            script: Composed script with arguments bound
            request: Request being served
            response: Pre-populated response, e.g. with a default Content-Type

        Returns:
            Response with status, headers, cookies and negotiated content

        Raises:
            Exception: Any evaluation error, re-raised unchanged after
                resources attached to the result or response are disposed
        """
        response = response or EndpointResponse()
        result = Node()
        signaler = self.create_signaler()
        try:
            async with signaler.scope(Scopes.REQUEST, request):
                async with signaler.scope(Scopes.RESPONSE, response):
                    async with signaler.scope(Scopes.RESULT, result):
                        await signaler.eval(script)
            response.content = self.negotiator(response, result)
            return response
        except BaseException:
            logger.debug(f"Evaluation of {request.verb} {request.url} failed, disposing")
            await dispose(result.value)
            if response.content is not result.value:
                await dispose(response.content)
            raise


__all__ = ["RequestExecutor"]
