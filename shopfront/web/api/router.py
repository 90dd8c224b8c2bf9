from fastapi.routing import APIRouter

from shopfront.categories import endpoints as categories
from shopfront.products import endpoints as products
from shopfront.users import endpoints as users
from shopfront.web.api import monitoring

api_router = APIRouter()
api_router.include_router(monitoring.router)
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(products.router, prefix="/products", tags=["products"])
