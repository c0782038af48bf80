"""
Seed the database with an admin, two users and a few sample todos.

    python -m app.seed
"""
import logging
from datetime import datetime, timedelta, timezone
from app.auth.utils import hash_password
from app.database.connection import SessionLocal, create_tables
from app.models.todo import Todo, TodoStatus
from app.models.user import User, UserRole, UserStatus

logger = logging.getLogger(__name__)

SEED_USERS = [
    ("Admin User", "admin@example.com", "Admin123!", UserRole.ADMIN),
    ("John Doe", "john@example.com", "Password123!", UserRole.USER),
    ("Jane Smith", "jane@example.com", "Password123!", UserRole.USER),
]

def _get_or_create_user(db, full_name, email, password, role):
    user = db.query(User).filter(User.email == email).first()
    if user:
        return user
    user = User(
        full_name=full_name,
        email=email,
        hashed_password=hash_password(password),
        role=role,
        status=UserStatus.ACTIVE,
    )
    db.add(user)
    db.flush()
    return user

def seed():
    create_tables()
    db = SessionLocal()
    try:
        admin, john, jane = (_get_or_create_user(db, *entry) for entry in SEED_USERS)

        if db.query(Todo).count() == 0:
            now = datetime.now(timezone.utc)
            db.add_all([
                Todo(
                    title="Setup project documentation",
                    description="Create comprehensive documentation for the todo management system",
                    status=TodoStatus.PENDING,
                    due_date=now + timedelta(days=7),
                    order=1,
                    created_by_id=admin.id,
                    assigned_to_id=john.id,
                ),
                Todo(
                    title="Implement user authentication",
                    description="Add JWT-based authentication",
                    status=TodoStatus.IN_PROGRESS,
                    due_date=now + timedelta(days=3),
                    order=2,
                    created_by_id=admin.id,
                    assigned_to_id=jane.id,
                ),
                Todo(
                    title="Design database schema",
                    description="Create ERD and implement database tables",
                    status=TodoStatus.COMPLETED,
                    due_date=now - timedelta(days=2),
                    order=3,
                    created_by_id=john.id,
                    assigned_to_id=john.id,
                ),
                Todo(
                    title="Create API endpoints",
                    description="Implement the REST API for todo management",
                    status=TodoStatus.PENDING,
                    due_date=now + timedelta(days=5),
                    order=4,
                    created_by_id=jane.id,
                    assigned_to_id=admin.id,
                ),
            ])

        db.commit()
        logger.info(f"Seeded {db.query(User).count()} users and {db.query(Todo).count()} todos")
    except Exception as e:
        db.rollback()
        logger.error(f"Seeding failed: {e}")
        raise
    finally:
        db.close()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed()
