from fastapi import FastAPI

from daytracker.api.routes_goals import router as goals_router
from daytracker.api.routes_health import router as health_router
from daytracker.api.routes_objectives import router as objectives_router
from daytracker.api.routes_summary import router as summary_router
from daytracker.api.routes_todos import router as todos_router

app = FastAPI(title="daytracker")

app.include_router(health_router)
app.include_router(todos_router)
app.include_router(goals_router)
app.include_router(objectives_router)
app.include_router(summary_router)
