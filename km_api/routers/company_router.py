from fastapi import APIRouter, Depends, Query, status
from km_api.routers.deps import get_company_service
from km_api.schemas.common_schema import APIResponse, PaginatedResponse
from km_api.schemas.company_schema import (
    CompanyCreate,
    CompanyResponse,
    CompanyUpdate,
    CompanyUserCreate,
    CompanyUserResponse,
    CompanyUserRoleUpdate,
)
from km_api.services.company_service import CompanyService

router = APIRouter(prefix="/companies", tags=["company"])

# /users/{user_id}/companies 는 사용자 기준 조회라 별도 라우터
membership_router = APIRouter(tags=["company"])

@router.get("", response_model=PaginatedResponse, summary="회사 목록 조회 API")
def list_companies(
    page: int = Query(1, description="페이지 번호 (1부터 시작)"),
    limit: int = Query(10, description="페이지당 건수 (최대 100)"),
    service: CompanyService = Depends(get_company_service),
):
    companies, pagination = service.get_companies_paginated(page, limit)
    return PaginatedResponse(
        success=True,
        data=[CompanyResponse.model_validate(c) for c in companies],
        pagination=pagination,
    )

@router.get(
    "/search",
    response_model=APIResponse,
    summary="회사 검색 API",
    description="회사명에 검색어가 포함된 회사를 대소문자 구분 없이 조회합니다.",
)
def search_companies(
    q: str = Query(..., max_length=100, description="검색어"),
    service: CompanyService = Depends(get_company_service),
):
    companies = service.search_companies(q)
    return APIResponse(success=True, data=[CompanyResponse.model_validate(c) for c in companies])

@router.get("/{company_id}", response_model=APIResponse, summary="회사 조회 API")
def get_company(company_id: int, service: CompanyService = Depends(get_company_service)):
    company = service.get_company_by_id(company_id)
    return APIResponse(success=True, data=CompanyResponse.model_validate(company))

@router.post(
    "",
    response_model=APIResponse,
    status_code=status.HTTP_201_CREATED,
    summary="회사 등록 API",
)
def create_company(data: CompanyCreate, service: CompanyService = Depends(get_company_service)):
    company = service.create_company(
        data.name, data.email, data.phone, data.address, data.website, data.description
    )
    return APIResponse(
        success=True,
        data=CompanyResponse.model_validate(company),
        message="Company created successfully",
    )

@router.put("/{company_id}", response_model=APIResponse, summary="회사 정보 수정 API")
def update_company(
    company_id: int,
    data: CompanyUpdate,
    service: CompanyService = Depends(get_company_service),
):
    company = service.update_company(
        company_id, data.name, data.email, data.phone, data.address, data.website, data.description
    )
    return APIResponse(
        success=True,
        data=CompanyResponse.model_validate(company),
        message="Company updated successfully",
    )

@router.delete(
    "/{company_id}",
    response_model=APIResponse,
    summary="회사 삭제 API",
    description="회사를 삭제합니다. 소속 관계도 함께 삭제됩니다.",
)
def delete_company(company_id: int, service: CompanyService = Depends(get_company_service)):
    service.delete_company(company_id)
    return APIResponse(success=True, message="Company deleted successfully")


# 소속 관계
@router.get("/{company_id}/users", response_model=APIResponse, summary="회사 소속 사용자 조회 API")
def list_company_users(company_id: int, service: CompanyService = Depends(get_company_service)):
    relations = service.get_users_by_company(company_id)
    return APIResponse(success=True, data=[CompanyUserResponse.model_validate(r) for r in relations])

@router.post(
    "/{company_id}/users",
    response_model=APIResponse,
    status_code=status.HTTP_201_CREATED,
    summary="회사에 사용자 추가 API",
    description="역할을 생략하면 member로 등록됩니다.",
)
def add_company_user(
    company_id: int,
    data: CompanyUserCreate,
    service: CompanyService = Depends(get_company_service),
):
    relation = service.add_user_to_company(data.user_id, company_id, data.role or "")
    return APIResponse(
        success=True,
        data=CompanyUserResponse.model_validate(relation),
        message="User added to company successfully",
    )

@router.put("/{company_id}/users/{user_id}", response_model=APIResponse, summary="사용자 역할 변경 API")
def update_company_user_role(
    company_id: int,
    user_id: int,
    data: CompanyUserRoleUpdate,
    service: CompanyService = Depends(get_company_service),
):
    relation = service.update_user_role(user_id, company_id, data.role)
    return APIResponse(success=True, data=CompanyUserResponse.model_validate(relation))

@router.delete("/{company_id}/users/{user_id}", response_model=APIResponse, summary="회사에서 사용자 제외 API")
def remove_company_user(
    company_id: int,
    user_id: int,
    service: CompanyService = Depends(get_company_service),
):
    service.remove_user_from_company(user_id, company_id)
    return APIResponse(success=True, message="User removed from company successfully")


@membership_router.get("/users/{user_id}/companies", response_model=APIResponse, summary="사용자 소속 회사 조회 API")
def list_user_companies(user_id: int, service: CompanyService = Depends(get_company_service)):
    relations = service.get_companies_by_user(user_id)
    return APIResponse(success=True, data=[CompanyUserResponse.model_validate(r) for r in relations])
