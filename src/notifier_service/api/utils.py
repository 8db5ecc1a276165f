"""Helper utilities for API handlers."""
from __future__ import annotations

from typing import Annotated, TypeVar

from aiohttp import web
from pydantic import BaseModel, StringConstraints, ValidationError

from backend_common.aiohttp_app import read_json

TModel = TypeVar("TModel", bound=BaseModel)

# Dot-namespaced event name, e.g. "partner.created"
EventTypeStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


async def parse_body(request: web.Request, model: type[TModel]) -> TModel:
    """Validate the JSON object body against *model*; 400 with pydantic's errors otherwise."""
    body = await read_json(request)
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise web.HTTPBadRequest(text=exc.json(), content_type="application/json") from exc
