"""
API Dependencies and Dependency Injection
Common dependencies used across API endpoints
"""

from fastapi import HTTPException, Request, status

from maritime_ai.services.ai_service import AIService

async def get_ai_service(request: Request) -> AIService:
    service = getattr(request.app.state, "ai_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="AI service is not available",
        )
    return service
