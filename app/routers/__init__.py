from .connections import router as connections_router
from .follows import router as follows_router
from .knowledge_points import router as knowledge_points_router
from .reactions import router as reactions_router

routes = [
    reactions_router,
    connections_router,
    knowledge_points_router,
    follows_router,
]
