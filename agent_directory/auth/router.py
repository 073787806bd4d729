from fastapi import APIRouter

from agent_directory.auth import service
from agent_directory.auth.schemas import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    RefreshRequest,
    RegisterRequest,
    UserResponse,
)
from agent_directory.core.dependencies import Client, CurrentUser, DbSession

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(user, tokens) -> AuthResponse:
    return AuthResponse(user=UserResponse.model_validate(user), **tokens.model_dump())


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(body: RegisterRequest, client: Client, db: DbSession) -> AuthResponse:
    user, tokens = await service.register_user(db, body, ip_address=client.ip_address)
    await db.commit()
    return _auth_response(user, tokens)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, client: Client, db: DbSession) -> AuthResponse:
    user, tokens = await service.authenticate_user(
        db, body.email, body.password, ip_address=client.ip_address, user_agent=client.user_agent
    )
    await db.commit()
    return _auth_response(user, tokens)


@router.post("/refresh", response_model=AuthResponse)
async def refresh(body: RefreshRequest, db: DbSession) -> AuthResponse:
    user, tokens = await service.refresh_tokens(db, body.refresh_token)
    return _auth_response(user, tokens)


@router.post("/logout")
async def logout(user: CurrentUser, client: Client, db: DbSession):
    await service.logout(db, user.id, ip_address=client.ip_address)
    await db.commit()
    return {"message": "Logged out"}


@router.get("/me", response_model=MeResponse)
async def me(user: CurrentUser, db: DbSession) -> MeResponse:
    account = await service.get_user(db, user.id)
    return MeResponse(
        **UserResponse.model_validate(account).model_dump(),
        roles=user.roles,
        permissions=sorted(user.permissions),
    )
