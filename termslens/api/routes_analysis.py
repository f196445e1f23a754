from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from termslens.analysis.models import AnalysisResult
from termslens.api.dependencies import AnalysisServices, get_services

router = APIRouter(prefix="/documents", tags=["analysis"])


class AnalyzeRequest(BaseModel):
    text: str = Field(min_length=1)


class QueryRequest(BaseModel):
    text: str = Field(min_length=1)
    question: str = Field(min_length=1)


class QueryResponse(BaseModel):
    answer: str


@router.post("/analyze", response_model=AnalysisResult, status_code=200)
async def analyze_document_endpoint(
    request: AnalyzeRequest, services: AnalysisServices = Depends(get_services)
) -> AnalysisResult:
    """Full sequential analysis. Degraded parts carry canned fallback text."""
    return await services.orchestrator.analyze_document(request.text)


@router.post("/query", response_model=QueryResponse, status_code=200)
async def query_document_endpoint(
    request: QueryRequest, services: AnalysisServices = Depends(get_services)
) -> QueryResponse:
    """Answer a free-form question about the document."""
    answer = await services.query_service.query(request.text, request.question)
    return QueryResponse(answer=answer)
