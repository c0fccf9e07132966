"""Request-scoped access to the services built at startup."""
from __future__ import annotations

from fastapi import HTTPException, Request

from ..numbering.generator import SequenceGenerator
from ..services import OrderIntakeService


def get_order_intake(request: Request) -> OrderIntakeService:
    intake = getattr(request.app.state, "order_intake", None)
    if intake is None:
        raise HTTPException(status_code=503, detail="Order intake not initialised")
    return intake


def get_sequence_generator(request: Request) -> SequenceGenerator:
    generator = getattr(request.app.state, "sequence_generator", None)
    if generator is None:
        raise HTTPException(status_code=503, detail="Numbering not initialised")
    return generator
