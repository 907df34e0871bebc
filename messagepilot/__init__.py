from fastapi import FastAPI
from messagepilot.core.config import configure_logging
from messagepilot.core.database import init_db
from messagepilot.routes.admin import router as admin_router
from messagepilot.routes.scheduled import router as scheduled_router

def create_app():
    # Initialize FastAPI app
    app = FastAPI(title="MessagePilot")

    # Configure logging
    configure_logging()

    # Initialize database
    init_db()

    # Register routes
    app.include_router(scheduled_router)
    app.include_router(admin_router)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @app.get("/")
    def read_root():
        return {"message": "Hello, MessagePilot"}

    return app
