"""Main API router."""

from fastapi import APIRouter

from formupload.api.v1 import upload

api_router = APIRouter()

api_router.include_router(upload.router)
