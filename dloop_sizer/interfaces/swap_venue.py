"""Swap venue protocol — exact-output swap execution abstraction."""
from typing import Protocol

from ..models import SwapRequest, SwapResult


class SwapVenue(Protocol):
    """A venue able to quote and execute exact-output swaps."""

    async def quote_exact_output(self, request: SwapRequest) -> int: ...

    async def execute_exact_output(
        self, request: SwapRequest, max_input: int
    ) -> SwapResult: ...
