from fastapi import APIRouter

from stockdata.api.endpoints import stocks, upload

api_router = APIRouter()

api_router.include_router(upload.router, tags=["csv"])
api_router.include_router(stocks.router, prefix="/api", tags=["stocks"])
