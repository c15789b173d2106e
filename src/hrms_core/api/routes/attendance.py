"""Attendance records and holiday calendars."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, Response, status

from hrms_core.api.dependencies import DbSession, Paging
from hrms_core.api.schemas import (
    AttendanceApproval,
    AttendanceRecordCreate,
    AttendanceRecordResponse,
    AttendanceRecordUpdate,
    AttendanceReportResponse,
    CheckInRequest,
    CheckOutRequest,
    ErrorResponse,
    HolidayCalendarResponse,
    HolidayCreate,
    HolidayResponse,
    HolidayStatisticsResponse,
    PageResponse,
    WorkingDaysResponse,
)
from hrms_core.services import (
    AttendanceRecordData,
    AttendanceService,
    AttendanceUpdate,
    HolidayData,
    HolidayService,
)

router = APIRouter(tags=["attendance"])

NOT_FOUND = {404: {"model": ErrorResponse}}
CONFLICT = {409: {"model": ErrorResponse}}


# ============================================================================
# Attendance
# ============================================================================


@router.post(
    "/attendance/check-in",
    response_model=AttendanceRecordResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, **CONFLICT},
)
async def check_in(db: DbSession, payload: CheckInRequest) -> AttendanceRecordResponse:
    record = await AttendanceService(db).check_in(
        payload.employee_id, location=payload.location, notes=payload.notes
    )
    return AttendanceRecordResponse.model_validate(record)


@router.post(
    "/attendance/check-out",
    response_model=AttendanceRecordResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def check_out(db: DbSession, payload: CheckOutRequest) -> AttendanceRecordResponse:
    record = await AttendanceService(db).check_out(
        payload.employee_id, location=payload.location, notes=payload.notes
    )
    return AttendanceRecordResponse.model_validate(record)


@router.post(
    "/attendance",
    response_model=AttendanceRecordResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, **CONFLICT},
)
async def record_attendance(
    db: DbSession, payload: AttendanceRecordCreate
) -> AttendanceRecordResponse:
    record = await AttendanceService(db).record_attendance(
        AttendanceRecordData(**payload.model_dump())
    )
    return AttendanceRecordResponse.model_validate(record)


@router.get(
    "/attendance/{attendance_record_id}",
    response_model=AttendanceRecordResponse,
    responses=NOT_FOUND,
)
async def get_attendance_record(
    db: DbSession, attendance_record_id: Annotated[UUID, Path()]
) -> AttendanceRecordResponse:
    record = await AttendanceService(db).get_attendance_record(attendance_record_id)
    return AttendanceRecordResponse.model_validate(record)


@router.patch(
    "/attendance/{attendance_record_id}",
    response_model=AttendanceRecordResponse,
    responses=NOT_FOUND,
)
async def update_attendance_record(
    db: DbSession,
    attendance_record_id: Annotated[UUID, Path()],
    payload: AttendanceRecordUpdate,
) -> AttendanceRecordResponse:
    record = await AttendanceService(db).update_attendance_record(
        attendance_record_id, AttendanceUpdate(**payload.model_dump())
    )
    return AttendanceRecordResponse.model_validate(record)


@router.post(
    "/attendance/{attendance_record_id}/approve",
    response_model=AttendanceRecordResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def approve_attendance(
    db: DbSession, attendance_record_id: Annotated[UUID, Path()], payload: AttendanceApproval
) -> AttendanceRecordResponse:
    record = await AttendanceService(db).approve_attendance(
        attendance_record_id, payload.approver_id
    )
    return AttendanceRecordResponse.model_validate(record)


@router.get(
    "/organizations/{organization_id}/attendance",
    response_model=PageResponse[AttendanceRecordResponse],
)
async def list_attendance(
    db: DbSession,
    paging: Paging,
    organization_id: Annotated[UUID, Path()],
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> PageResponse[AttendanceRecordResponse]:
    page = await AttendanceService(db).get_attendance_records(
        organization_id, paging, status_filter, start_date, end_date
    )
    return PageResponse.from_page(page, AttendanceRecordResponse)


@router.get(
    "/employees/{employee_id}/attendance",
    response_model=list[AttendanceRecordResponse],
    responses=NOT_FOUND,
)
async def list_employee_attendance(
    db: DbSession,
    employee_id: Annotated[UUID, Path()],
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[AttendanceRecordResponse]:
    records = await AttendanceService(db).get_employee_attendance(
        employee_id, start_date, end_date
    )
    return [AttendanceRecordResponse.model_validate(r) for r in records]


@router.get(
    "/employees/{employee_id}/attendance/report",
    response_model=AttendanceReportResponse,
    responses=NOT_FOUND,
)
async def attendance_report(
    db: DbSession, employee_id: Annotated[UUID, Path()], start_date: date, end_date: date
) -> AttendanceReportResponse:
    report = await AttendanceService(db).generate_attendance_report(
        employee_id, start_date, end_date
    )
    return AttendanceReportResponse.model_validate(report)


# ============================================================================
# Holidays
# ============================================================================


@router.post(
    "/holidays",
    response_model=HolidayResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, **CONFLICT},
)
async def create_holiday(db: DbSession, payload: HolidayCreate) -> HolidayResponse:
    holiday = await HolidayService(db).create_holiday(HolidayData(**payload.model_dump()))
    return HolidayResponse.model_validate(holiday)


@router.get("/holidays/{holiday_id}", response_model=HolidayResponse, responses=NOT_FOUND)
async def get_holiday(db: DbSession, holiday_id: Annotated[UUID, Path()]) -> HolidayResponse:
    holiday = await HolidayService(db).get_holiday(holiday_id)
    return HolidayResponse.model_validate(holiday)


@router.put(
    "/holidays/{holiday_id}",
    response_model=HolidayResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def update_holiday(
    db: DbSession, holiday_id: Annotated[UUID, Path()], payload: HolidayCreate
) -> HolidayResponse:
    holiday = await HolidayService(db).update_holiday(
        holiday_id, HolidayData(**payload.model_dump())
    )
    return HolidayResponse.model_validate(holiday)


@router.delete(
    "/holidays/{holiday_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"model": ErrorResponse}, **NOT_FOUND},
)
async def delete_holiday(db: DbSession, holiday_id: Annotated[UUID, Path()]) -> Response:
    await HolidayService(db).delete_holiday(holiday_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/organizations/{organization_id}/holidays",
    response_model=PageResponse[HolidayResponse],
)
async def list_holidays(
    db: DbSession,
    paging: Paging,
    organization_id: Annotated[UUID, Path()],
    name: str | None = None,
    holiday_type: str | None = None,
    optional: bool | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> PageResponse[HolidayResponse]:
    """List holidays, optionally filtered by name, type, optional flag or date range."""
    service = HolidayService(db)
    if any(v is not None for v in (name, holiday_type, optional, start_date, end_date)):
        page = await service.search_holidays(
            organization_id, paging, name, holiday_type, optional, start_date, end_date
        )
    else:
        page = await service.get_holidays(organization_id, paging)
    return PageResponse.from_page(page, HolidayResponse)


@router.get(
    "/organizations/{organization_id}/holidays/upcoming",
    response_model=list[HolidayResponse],
)
async def upcoming_holidays(
    db: DbSession, organization_id: Annotated[UUID, Path()]
) -> list[HolidayResponse]:
    holidays = await HolidayService(db).get_upcoming_holidays(organization_id)
    return [HolidayResponse.model_validate(h) for h in holidays]


@router.get(
    "/organizations/{organization_id}/holidays/calendar/{year}",
    response_model=HolidayCalendarResponse,
    responses=NOT_FOUND,
)
async def holiday_calendar(
    db: DbSession, organization_id: Annotated[UUID, Path()], year: Annotated[int, Path()]
) -> HolidayCalendarResponse:
    calendar = await HolidayService(db).generate_holiday_calendar(organization_id, year)
    return HolidayCalendarResponse.model_validate(calendar)


@router.get(
    "/organizations/{organization_id}/holidays/statistics/{year}",
    response_model=HolidayStatisticsResponse,
    responses=NOT_FOUND,
)
async def holiday_statistics(
    db: DbSession, organization_id: Annotated[UUID, Path()], year: Annotated[int, Path()]
) -> HolidayStatisticsResponse:
    statistics = await HolidayService(db).get_holiday_statistics(organization_id, year)
    return HolidayStatisticsResponse.model_validate(statistics)


@router.get(
    "/organizations/{organization_id}/working-days",
    response_model=WorkingDaysResponse,
    responses={400: {"model": ErrorResponse}},
)
async def working_days(
    db: DbSession, organization_id: Annotated[UUID, Path()], start_date: date, end_date: date
) -> WorkingDaysResponse:
    days = await HolidayService(db).calculate_working_days(organization_id, start_date, end_date)
    return WorkingDaysResponse(start_date=start_date, end_date=end_date, working_days=days)
