from fastapi import APIRouter, Depends, Query, status
from km_api.routers.deps import get_user_service
from km_api.schemas.common_schema import APIResponse, PaginatedResponse
from km_api.schemas.user_schema import UserCreate, UserLogin, UserResponse, UserUpdate
from km_api.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["user"])

@router.get(
    "",
    response_model=PaginatedResponse,
    summary="사용자 목록 조회 API",
    description="최신 가입순으로 사용자 목록을 페이지 단위로 조회합니다.",
)
def list_users(
    page: int = Query(1, description="페이지 번호 (1부터 시작)"),
    limit: int = Query(10, description="페이지당 건수 (최대 100)"),
    service: UserService = Depends(get_user_service),
):
    users, pagination = service.get_users_paginated(page, limit)
    return PaginatedResponse(
        success=True,
        data=[UserResponse.model_validate(u) for u in users],
        pagination=pagination,
    )

@router.get("/{user_id}", response_model=APIResponse, summary="사용자 조회 API")
def get_user(user_id: int, service: UserService = Depends(get_user_service)):
    user = service.get_user_by_id(user_id)
    return APIResponse(success=True, data=UserResponse.model_validate(user))

@router.post(
    "",
    response_model=APIResponse,
    status_code=status.HTTP_201_CREATED,
    summary="회원가입 API",
    description="""
    신규 사용자를 생성합니다.
    비밀번호는 해시로만 저장되며 응답에는 포함되지 않습니다.
    """,
)
def create_user(data: UserCreate, service: UserService = Depends(get_user_service)):
    user = service.create(data.name, data.email, data.password)
    return APIResponse(
        success=True,
        data=UserResponse.model_validate(user),
        message="User created successfully",
    )

@router.put("/{user_id}", response_model=APIResponse, summary="회원 정보 수정 API")
def update_user(user_id: int, data: UserUpdate, service: UserService = Depends(get_user_service)):
    user = service.update_user(user_id, data.name, data.email)
    return APIResponse(
        success=True,
        data=UserResponse.model_validate(user),
        message="User updated successfully",
    )

@router.delete("/{user_id}", response_model=APIResponse, summary="회원 삭제 API")
def delete_user(user_id: int, service: UserService = Depends(get_user_service)):
    service.delete_user(user_id)
    return APIResponse(success=True, message="User deleted successfully")

@router.post(
    "/login",
    response_model=APIResponse,
    summary="로그인 API",
    description="이메일과 비밀번호를 확인하고 사용자 정보를 반환합니다.",
)
def login(data: UserLogin, service: UserService = Depends(get_user_service)):
    user = service.authenticate_user(data.email, data.password)
    return APIResponse(success=True, data=UserResponse.model_validate(user))
