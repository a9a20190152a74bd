from typing import Annotated

from fastapi import Depends

from ..core.supabase_client import get_supabase
from ..repositories.attempt_repository import AttemptRepository
from ..repositories.quiz_repository import QuizRepository
from ..repositories.user_repository import UserRepository
from ..services.attempt_service import AttemptService
from ..services.quiz_service import QuizService
from ..services.user_service import UserService

# Service factories; tests swap these through app.dependency_overrides


def get_quiz_service() -> QuizService:
    return QuizService(QuizRepository(get_supabase()))


def get_attempt_service() -> AttemptService:
    client = get_supabase()
    return AttemptService(
        QuizRepository(client),
        AttemptRepository(client),
        UserRepository(client),
    )


def get_user_service() -> UserService:
    client = get_supabase()
    return UserService(UserRepository(client), QuizRepository(client))


QuizServiceDep = Annotated[QuizService, Depends(get_quiz_service)]
AttemptServiceDep = Annotated[AttemptService, Depends(get_attempt_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
