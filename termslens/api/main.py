from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from termslens.analysis.errors import EmptyInputError
from termslens.api.errors import empty_input_handler, validation_exception_handler
from termslens.api.routes_analysis import router as analysis_router
from termslens.api.routes_status import router as status_router

app = FastAPI(
    title="termslens",
    version="0.1.0",
    description="Rate-limited, fault-tolerant terms and conditions analysis",
)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(EmptyInputError, empty_input_handler)
app.include_router(analysis_router)
app.include_router(status_router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
