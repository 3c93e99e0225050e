from fastapi import APIRouter

from gold2money.modules.auth import router as auth_router
from gold2money.modules.loan_applications import router as loan_applications_router

api_router = APIRouter()

api_router.include_router(auth_router, tags=["Authentication"])

api_router.include_router(loan_applications_router, tags=["Loan Applications"])
