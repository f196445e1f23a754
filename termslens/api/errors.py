from __future__ import annotations

from typing import Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from termslens.analysis.errors import EmptyInputError

PROBLEM_TYPE_PREFIX = "urn:termslens:error:"


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details response."""

    type: str = "about:blank"
    title: str
    status: int
    detail: str
    instance: str | None = None
    errors: list[dict] | None = None


def problem_response(
    request: Request,
    kind: str,
    title: str,
    detail: str,
    status: int = 422,
    errors: Optional[list[dict]] = None,
) -> JSONResponse:
    """Render a problem document whose type is ``urn:termslens:error:<kind>``."""
    problem = ProblemDetail(
        type=f"{PROBLEM_TYPE_PREFIX}{kind}",
        title=title,
        status=status,
        detail=detail,
        instance=str(request.url),
        errors=errors,
    )
    return JSONResponse(status_code=status, content=problem.model_dump(exclude_none=True))


def _field_errors(exc: RequestValidationError) -> list[dict]:
    fields = []
    for err in exc.errors():
        location = " -> ".join(str(part) for part in err["loc"] if part != "body")
        fields.append({"field": location, "message": err["msg"], "type": err["type"]})
    return fields


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = _field_errors(exc)
    return problem_response(
        request,
        "validation",
        "Validation Error",
        "; ".join(f"{f['field']}: {f['message']}" for f in fields),
        errors=fields,
    )


async def empty_input_handler(request: Request, exc: EmptyInputError) -> JSONResponse:
    return problem_response(request, "empty-input", "Empty Document", str(exc))
