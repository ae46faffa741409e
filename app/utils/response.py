# app/utils/response.py

from typing import TypeVar, Generic, Optional, Dict, Any
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

T = TypeVar("T")


def success_response(message: str, data: Optional[T] = None) -> Dict[str, Any]:
    return {
        "success": True,
        "message": message,
        "data": data,
    }


def partial_success_response(message: str, data: Optional[Any] = None) -> JSONResponse:
    """207: the primary action happened but a follow-up write did not."""
    return JSONResponse(
        status_code=207,
        content=jsonable_encoder(
            {
                "success": True,
                "message": message,
                "data": data,
            }
        ),
    )


class APIResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None
