from __future__ import annotations

import dataclasses
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from docmate.enrichment import LANGUAGES, AllProvidersExhausted, EnrichmentService

from api.dependencies import get_enrichment

router = APIRouter(prefix="/enrichment", tags=["enrichment"])


class TranslateBody(BaseModel):
    text: str
    target_lang: str
    source_lang: str = "en"


class AnalyzeBody(BaseModel):
    content: str
    label: str = "Document"


class PaginateBody(BaseModel):
    content: str
    words_per_page: Optional[int] = None


@router.post("/translate")
async def translate(body: TranslateBody, enrichment: EnrichmentService = Depends(get_enrichment)):
    try:
        result = await enrichment.translate_detailed(body.text, body.target_lang, body.source_lang)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except AllProvidersExhausted as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return dataclasses.asdict(result)


@router.get("/search")
async def search(query: str = "", enrichment: EnrichmentService = Depends(get_enrichment)):
    try:
        result = await enrichment.search(query)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return dataclasses.asdict(result)


@router.post("/analyze")
async def analyze(body: AnalyzeBody, enrichment: EnrichmentService = Depends(get_enrichment)):
    result = await enrichment.analyze(body.content, body.label)
    return dataclasses.asdict(result)


@router.get("/define/{word}")
async def define(word: str, enrichment: EnrichmentService = Depends(get_enrichment)):
    try:
        result = await enrichment.define(word)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return dataclasses.asdict(result)


@router.get("/define/{word}/candidates")
async def define_candidates(word: str, enrichment: EnrichmentService = Depends(get_enrichment)):
    try:
        results = await enrichment.define_candidates(word)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return [dataclasses.asdict(r) for r in results]


@router.post("/paginate")
def paginate(body: PaginateBody, enrichment: EnrichmentService = Depends(get_enrichment)):
    try:
        pages = enrichment.paginate(body.content, body.words_per_page)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"page_count": len(pages), "pages": pages}


@router.get("/providers")
def list_providers(enrichment: EnrichmentService = Depends(get_enrichment)):
    return enrichment.describe_providers()


@router.get("/languages")
def list_languages():
    return [dataclasses.asdict(lang) for lang in LANGUAGES.values()]
