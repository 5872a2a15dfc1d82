"""
UserRepository for database operations on User model
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from config.settings import STATUS_TRIAL
from database_models import User


class UserRepository:
    """
    Repository class for User database operations.
    Encapsulates all database logic for the User model.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize the repository with a database session.

        Args:
            db: AsyncSession instance for database operations
        """
        self.db = db

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        """
        Retrieve a user by the auth provider's user id.

        Args:
            user_id: External user id

        Returns:
            User object if found, None otherwise
        """
        result = await self.db.execute(
            select(User).where(User.id == str(user_id))
        )
        return result.scalar_one_or_none()

    async def create_user(self, user_data: dict) -> User:
        """
        Create a new user in the database.

        Args:
            user_data: Dictionary containing user data. Must include:
                - id: str
                Optional:
                - email: str
                - trial_started_at / trial_expires_at: datetime
                - subscription_status: str

        Returns:
            Created User object
        """
        email = user_data.get("email")
        user = User(
            id=str(user_data["id"]),
            email=email.lower() if email else None,
            trial_started_at=user_data.get("trial_started_at"),
            trial_expires_at=user_data.get("trial_expires_at"),
            subscription_status=user_data.get("subscription_status", STATUS_TRIAL),
            lemonsqueezy_subscription_id=user_data.get("lemonsqueezy_subscription_id"),
        )
        self.db.add(user)
        await self.db.flush()  # Flush to surface constraint errors before commit
        await self.db.refresh(user)
        return user

    async def update_user(self, user: User, updates: dict) -> User:
        """
        Update user fields.

        Args:
            user: User object to update
            updates: Dictionary of fields to update (e.g., {"subscription_status": "active"})

        Returns:
            Updated User object
        """
        for key, value in updates.items():
            if hasattr(user, key):
                setattr(user, key, value)

        await self.db.flush()
        await self.db.refresh(user)
        return user
