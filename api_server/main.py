"""
Crypto Agent API Server Main Application
"""
import os
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from api_server.routers import chat
from api_server.services.chat_service import ChatService


def create_app(chat_service: Optional[ChatService] = None) -> FastAPI:
    app = FastAPI(
        title="Crypto Agent API",
        description="Chat API for the crypto price agent",
        version="0.1.0",
    )
    app.state.chat_service = chat_service

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Adjust this in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(chat.router, prefix="/api/v1", tags=["Chat"])

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint providing basic info about the API"""
        return {
            "name": "Crypto Agent API Server",
            "description": "Chat API for the crypto price agent",
            "version": "0.1.0",
            "status": "running",
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        service = app.state.chat_service
        return {
            "status": "healthy" if service is not None else "degraded",
            "components": {
                "api_server": "up",
                "chat_service": "up" if service is not None else "down",
                "sessions": len(service.sessions) if service is not None else 0,
            },
        }

    @app.on_event("startup")
    async def startup_event():
        """Initialize the chat service on startup"""
        if app.state.chat_service is not None:
            return
        try:
            logger.info("Initializing chat service...")
            app.state.chat_service = await ChatService.from_env()
            logger.info("Chat service initialized successfully")
        except Exception as e:
            # Let the app start anyway, /health reports the problem
            logger.error(f"Error initializing chat service: {str(e)}")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "An internal server error occurred"},
        )

    return app


def main():
    import uvicorn

    load_dotenv()
    port = int(os.getenv("API_SERVER_PORT", "9000"))
    uvicorn.run(create_app(), host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
