from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import db, settings
from core.log import configure_logging
from users import router as users_router

configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI):
    # The pool is only needed when users live in Postgres.
    uses_postgres = settings.users_store() == settings.STORE_POSTGRES
    if uses_postgres:
        await db.init_pool()
    try:
        yield
    finally:
        if uses_postgres:
            await db.close_pool()


app = FastAPI(lifespan=lifespan)

# Allow local frontend dev server to call this API from the browser.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(users_router.router, tags=["users"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "users api"}


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.server_host(), port=settings.server_port())


if __name__ == "__main__":
    run()
