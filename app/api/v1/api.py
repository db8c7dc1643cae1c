from fastapi import APIRouter

from app.api.v1.routes import users, goals, progress, investments, transactions, history, prices, notification

api_router = APIRouter()

api_router.include_router(users.router, prefix="/users", tags=["User Management"])
api_router.include_router(goals.router)
api_router.include_router(progress.router)
api_router.include_router(investments.router)
api_router.include_router(transactions.router)
api_router.include_router(history.router)
api_router.include_router(prices.router)
api_router.include_router(notification.router, prefix="/notification", tags=["Notifications"])
