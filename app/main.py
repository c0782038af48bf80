from datetime import datetime, timezone
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from app.database.connection import create_tables
from app.api.routes import admin, auth, files, todos, users
from app.config.settings import settings
from app.config.storage import profile_storage
import logging

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create tables
try:
    create_tables()
    logger.info("Database tables created/verified successfully")
except Exception as e:
    logger.error(f"Failed to create tables: {e}")
    raise

# FastAPI application
app = FastAPI(
    title="Team Todo API",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CORS_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(admin.router)
app.include_router(todos.router)
app.include_router(files.router)

# Profile pictures are public; todo attachments only go through /files/download
app.mount(
    "/uploads/profiles",
    StaticFiles(directory=str(profile_storage.ensure_root())),
    name="profiles",
)

@app.get("/health")
def health_check():
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}

@app.get("/")
def read_root():
    """
    Welcome message with API information
    """
    return {
        "message": "Welcome to Team Todo API",
        "version": "2.0.0",
        "features": [
            "User Authentication",
            "Todo Assignment",
            "Todo Ordering",
            "File Attachments",
            "User Administration"
        ],
        "docs": "/docs",
        "redoc": "/redoc",
        "endpoints": {
            "auth": {
                "register": "POST /auth/register",
                "login": "POST /auth/login",
                "refresh": "POST /auth/refresh",
                "logout": "POST /auth/logout",
                "me": "GET /auth/me"
            },
            "todos": {
                "get_todos": "GET /todos",
                "create_todo": "POST /todos",
                "get_todo": "GET /todos/{id}",
                "update_todo": "PUT /todos/{id}",
                "delete_todo": "DELETE /todos/{id}",
                "reorder_todos": "PATCH /todos/reorder",
                "assignable_users": "GET /todos/users/assignable"
            },
            "files": {
                "upload": "POST /files/upload/{todo_id}",
                "list": "GET /files",
                "list_for_todo": "GET /files/todo/{todo_id}",
                "download": "GET /files/download/{id}",
                "delete": "DELETE /files/{id}"
            },
            "admin": {
                "list_users": "GET /admin/users",
                "set_status": "PATCH /admin/users/{id}/status",
                "delete_user": "DELETE /admin/users/{id}"
            }
        }
    }


# Run the application
if __name__ == "__main__":
    import uvicorn
    print("Starting Team Todo API server...")
    print("API Documentation will be available at: http://127.0.0.1:8000/docs")
    uvicorn.run("app.main:app", host="127.0.0.1", port=8000, reload=True)
