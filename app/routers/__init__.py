from .post import router as post_router
from .report import router as report_router
from .user import router as user_router

routes = [
    post_router,
    report_router,
    user_router,
]
