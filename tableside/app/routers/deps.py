from functools import lru_cache
from typing import Any

from fastapi import Depends

from tableside.app.core.config import settings
from tableside.app.routers.schemas import DataIn
from tableside.app.services.pipeline import RequestContext
from tableside.app.services.validation import ServiceRules


@lru_cache
def get_service_rules() -> ServiceRules:
    return ServiceRules.from_settings(settings)


def payload_data(payload: DataIn | None) -> dict[str, Any]:
    return payload.data if payload is not None else {}


def request_context(rules: ServiceRules = Depends(get_service_rules)) -> RequestContext:
    """Fresh context per request, stamped with the restaurant's current time."""
    return RequestContext(data={}, rules=rules, now=rules.now())
