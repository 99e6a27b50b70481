"""
FastAPI server exposing the generation proxy endpoint
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from core.errors import GenerationServiceError, ProviderNotConfigured
from core.llm import GenerationService, LLMGenerationService
from utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

app = FastAPI(title="Brievify Generation API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class GenerateRequest(BaseModel):
    prompt: str = Field(min_length=1)
    # structured type hint for the response; forwarded as JSON mode
    response_schema: Optional[Dict[str, Any]] = Field(default=None, alias="schema")


class GenerateResponse(BaseModel):
    text: str


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request body.", "details": jsonable_encoder(exc.errors())},
    )


def get_generation_service() -> GenerationService:
    return LLMGenerationService()


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


@app.post("/api/generate", response_model=GenerateResponse)
async def generate(request: GenerateRequest, service: GenerationService = Depends(get_generation_service)):
    try:
        text = await service.generate(request.prompt, request.response_schema)
    except ProviderNotConfigured as e:
        logger.error(f"Generation provider not configured: {e.detail}")
        return JSONResponse(status_code=500, content={"error": e.detail})
    except GenerationServiceError as e:
        logger.error(f"Failed to generate content: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to generate content from AI.", "details": str(e)},
        )
    return GenerateResponse(text=text)


if __name__ == "__main__":
    import uvicorn

    setup_logging()
    uvicorn.run(app, host="0.0.0.0", port=8000)
