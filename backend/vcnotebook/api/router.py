"""API router."""

from fastapi import APIRouter

from vcnotebook.api.endpoints import config, payments

api_router = APIRouter()

api_router.include_router(config.router, tags=["Configuration"])
api_router.include_router(payments.router, tags=["Payments"])
