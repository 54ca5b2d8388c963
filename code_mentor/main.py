from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from code_mentor.core.config import get_settings
from code_mentor.core.errors import setup_exception_handlers
from code_mentor.core.logging import setup_logging
from code_mentor.routers import chat, explain, projects, quiz, speech, system, visual


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Code Mentor backend: project upload, file browsing, AI explanations, quizzes and narration",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins or ["*"],  # fallback when misconfigured
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    # Routers
    app.include_router(system.router)
    app.include_router(projects.router)
    app.include_router(chat.router)
    app.include_router(explain.router)
    app.include_router(quiz.router)
    app.include_router(visual.router)
    app.include_router(speech.router)

    # Redirect root → docs
    @app.get("/", include_in_schema=False)
    async def root():
        return RedirectResponse(url="/docs")

    return app


app = create_app()
