from fastapi import APIRouter
from justoo.api.v1 import auth

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/customer/auth", tags=["customer-auth"])
