"""
Request/response exchanges over a transport.

One request is in flight at a time. A request frame is written once and then
one or more response frames carrying the same address and command are read.
Any failure after the write leaves the stream position unknown, so the
channel refuses further exchanges.
"""

import logging
from typing import Callable, Iterator, Optional, TypeVar

from .cancellation import CancellationToken
from .commands import Request
from .constants import Command
from .exceptions import TransportError
from .frame import Frame, FrameBuilder, FrameReader
from .transport import BaseTransport

logger = logging.getLogger(__name__)

TResponse = TypeVar("TResponse")


class Channel:
    """Frames requests and correlates responses for one reader address."""

    def __init__(self, transport: BaseTransport, address: int):
        """
        Initialize channel.

        Args:
            transport: Open transport, owned by this channel
            address: Reader address used in every frame
        """
        self.transport = transport
        self.address = address
        self._reader = FrameReader(transport, address)
        self._broken: Optional[BaseException] = None

    @property
    def broken(self) -> bool:
        return self._broken is not None

    def encode(self, request: Request) -> bytes:
        """Serialize a request into a complete frame."""
        return FrameBuilder.build(Frame(self.address, request.command, request.encode_payload()))

    def send_receive(
        self,
        request: Request[TResponse],
        token: Optional[CancellationToken] = None
    ) -> TResponse:
        """
        Send a request and read exactly one response.

        Args:
            request: Request to send
            token: Cancellation token for blocking reads

        Returns:
            Parsed response
        """
        self._write(request)
        return self._read(request, token)

    def send_receive_until(
        self,
        request: Request[TResponse],
        should_continue: Callable[[TResponse], bool],
        token: Optional[CancellationToken] = None
    ) -> None:
        """
        Send a request and read responses while should_continue returns True.

        Args:
            request: Request to send
            should_continue: Called with each response in arrival order
            token: Cancellation token for blocking reads

        Stopping on a response that does not complete the request, or an
        exception from should_continue, leaves frames unread and marks the
        channel broken.
        """
        self._write(request)
        while True:
            response = self._read(request, token)
            try:
                proceed = should_continue(response)
            except BaseException as e:
                self._broken = e
                raise
            if not proceed:
                break

        if not request.is_final(response):
            self._broken = TransportError(
                f"{Command.name_of(request.command)} stopped before completion"
            )

    def iter_responses(
        self,
        request: Request[TResponse],
        token: Optional[CancellationToken] = None
    ) -> Iterator[TResponse]:
        """
        Send a request and yield responses until the request reports completion.

        The request is written on the first call to next(). Closing the
        generator before the final response leaves frames unread, so the
        channel is marked broken.
        """
        self._write(request)
        finished = False
        try:
            while not finished:
                response = self._read(request, token)
                finished = request.is_final(response)
                yield response
        finally:
            if not finished and self._broken is None:
                self._broken = TransportError(
                    f"{Command.name_of(request.command)} abandoned before completion"
                )

    def _write(self, request: Request) -> None:
        if self._broken is not None:
            raise TransportError(
                f"Channel unusable after previous failure: {self._broken}"
            ) from self._broken

        # Encoding errors are raised here, before anything reaches the wire
        data = self.encode(request)
        logger.debug(f"Sending {Command.name_of(request.command)}: {data.hex(' ')}")
        try:
            self.transport.write(data)
        except Exception as e:
            self._broken = e
            raise

    def _read(self, request: Request[TResponse], token: Optional[CancellationToken]) -> TResponse:
        try:
            frame = self._reader.read(request.command, request.validate_response_size, token)
            return request.parse_response(frame.payload)
        except Exception as e:
            self._broken = e
            raise
