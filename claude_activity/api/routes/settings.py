"""
Settings API routes
"""

import logging

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

router = APIRouter()
logger = logging.getLogger(__name__)


class ApiKeyRequest(BaseModel):
    apiKey: str


class ApiKeyResponse(BaseModel):
    hasApiKey: bool


@router.get("/api-key")
def get_api_key_status(request: Request) -> ApiKeyResponse:
    """Report whether a Gemini credential is configured"""
    return ApiKeyResponse(hasApiKey=request.app.state.summary_service.has_api_key)


@router.put("/api-key")
def set_api_key(body: ApiKeyRequest, request: Request) -> ApiKeyResponse:
    """Store the Gemini API key"""
    service = request.app.state.summary_service
    try:
        service.set_api_key(body.apiKey)
    except (OSError, RuntimeError) as e:
        logger.error("Failed to store API key: %s", e)
        raise HTTPException(status_code=500, detail="Could not store API key")
    return ApiKeyResponse(hasApiKey=service.has_api_key)
