from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .access.guard import AccessGuard
from .access.service import AccessService
from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.report_service import AuditReportService
from .audit.service import AuditService
from .compliance.mysql_compliance_repository import MySQLComplianceAlertRepository
from .compliance.service import ComplianceService
from .core.constants import INVITE_TTL_HOURS, ISP_DUE_DAYS, PAIRING_TOKEN_TTL_MINUTES, RESET_TOKEN_TTL_MINUTES
from .database.connection import DatabaseConnection, DBConfig
from .devices.mysql_device_repository import MySQLDeviceRepository
from .devices.service import DeviceService
from .fire_evac.mysql_fire_evac_repository import MySQLFireEvacRepository
from .fire_evac.service import FireEvacService
from .isp.mysql_isp_repository import MySQLAcknowledgmentRepository, MySQLIspRepository
from .isp.service import IspService
from .kiosks.mysql_kiosk_repository import MySQLKioskRepository, MySQLPairingTokenRepository
from .kiosks.service import KioskService
from .locations.mysql_location_repository import MySQLLocationRepository
from .locations.service import LocationService
from .logs.mysql_log_repository import MySQLResidentLogRepository
from .logs.service import ResidentLogService
from .residents.mysql_resident_repository import MySQLGuardianRepository, MySQLResidentRepository
from .residents.service import GuardianService, ResidentService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.service import SettingsService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.service import CareShiftService
from .supervisor.mysql_time_exception_repository import MySQLTimeExceptionReviewRepository
from .supervisor.service import SupervisorService, TimeExceptionService
from .teams.service import TeamService
from .users.mysql_employee_repository import MySQLEmployeeRepository
from .users.mysql_user_repository import MySQLPasswordResetRepository, MySQLRoleRepository, MySQLUserRepository
from .users.service import AuthService, EmployeeService, PasswordResetService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    guard: AccessGuard
    audit_service: AuditService
    audit_report_service: AuditReportService
    access_service: AccessService
    auth_service: AuthService
    employee_service: EmployeeService
    password_reset_service: PasswordResetService
    shift_service: CareShiftService
    resident_service: ResidentService
    guardian_service: GuardianService
    isp_service: IspService
    log_service: ResidentLogService
    kiosk_service: KioskService
    device_service: DeviceService
    settings_service: SettingsService
    location_service: LocationService
    supervisor_service: SupervisorService
    time_exception_service: TimeExceptionService
    team_service: TeamService
    fire_evac_service: FireEvacService
    compliance_service: ComplianceService


def wire_services(
    *,
    conn: Optional[DatabaseConnection],
    users,
    roles,
    employees,
    resets,
    audit_entries,
    shifts,
    settings,
    residents,
    guardians,
    isps,
    acks,
    logs,
    kiosks,
    pairing_tokens,
    devices,
    locations,
    fire_evac_plans,
    alerts,
    time_exception_reviews,
    options: Optional[dict] = None,
) -> Container:
    """Build every service on top of the given repositories.

    Production passes MySQL repositories; tests pass in-memory fakes.
    """
    options = options or {}
    audit_service = AuditService(audit_entries)
    guard = AccessGuard(roles, audit_service)

    shift_service = CareShiftService(shifts, settings, guard, audit_service)
    isp_service = IspService(
        isps, acks, residents, guard, audit_service, due_days=int(options.get("ISP_DUE_DAYS", ISP_DUE_DAYS))
    )

    return Container(
        conn=conn,
        guard=guard,
        audit_service=audit_service,
        audit_report_service=AuditReportService(audit_entries, users, employees, roles, guard),
        access_service=AccessService(employees, roles, audit_service),
        auth_service=AuthService(users, roles, employees, audit_service),
        employee_service=EmployeeService(
            users,
            employees,
            roles,
            guard,
            audit_service,
            invite_ttl_hours=int(options.get("INVITE_TTL_HOURS", INVITE_TTL_HOURS)),
        ),
        password_reset_service=PasswordResetService(
            users,
            resets,
            audit_service,
            ttl_minutes=int(options.get("RESET_TOKEN_TTL_MINUTES", RESET_TOKEN_TTL_MINUTES)),
        ),
        shift_service=shift_service,
        resident_service=ResidentService(residents, guard, audit_service),
        guardian_service=GuardianService(guardians, residents, guard, audit_service),
        isp_service=isp_service,
        log_service=ResidentLogService(logs, residents, users, roles, isp_service, guard, audit_service),
        kiosk_service=KioskService(
            kiosks,
            pairing_tokens,
            shift_service,
            guard,
            audit_service,
            token_ttl_minutes=int(options.get("PAIRING_TOKEN_TTL_MINUTES", PAIRING_TOKEN_TTL_MINUTES)),
        ),
        device_service=DeviceService(devices, users, guard, audit_service),
        settings_service=SettingsService(
            settings, users, roles, employees, residents, kiosks, audit_entries, guard, audit_service
        ),
        location_service=LocationService(locations, residents, kiosks, shifts, employees, guard, audit_service),
        supervisor_service=SupervisorService(roles, employees, shifts, residents, isps, acks, guard),
        time_exception_service=TimeExceptionService(shifts, employees, time_exception_reviews, guard, audit_service),
        team_service=TeamService(roles, employees, shifts, logs, residents, guard),
        fire_evac_service=FireEvacService(fire_evac_plans, residents, guard, audit_service),
        compliance_service=ComplianceService(alerts, settings, residents, isps, fire_evac_plans, guard, audit_service),
    )


def build_container(*, db_config: dict, options: Optional[dict] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return wire_services(
        conn=conn,
        users=MySQLUserRepository(conn),
        roles=MySQLRoleRepository(conn),
        employees=MySQLEmployeeRepository(conn),
        resets=MySQLPasswordResetRepository(conn),
        audit_entries=MySQLAuditRepository(conn),
        shifts=MySQLShiftRepository(conn),
        settings=MySQLSettingsRepository(conn),
        residents=MySQLResidentRepository(conn),
        guardians=MySQLGuardianRepository(conn),
        isps=MySQLIspRepository(conn),
        acks=MySQLAcknowledgmentRepository(conn),
        logs=MySQLResidentLogRepository(conn),
        kiosks=MySQLKioskRepository(conn),
        pairing_tokens=MySQLPairingTokenRepository(conn),
        devices=MySQLDeviceRepository(conn),
        locations=MySQLLocationRepository(conn),
        fire_evac_plans=MySQLFireEvacRepository(conn),
        alerts=MySQLComplianceAlertRepository(conn),
        time_exception_reviews=MySQLTimeExceptionReviewRepository(conn),
        options=options,
    )
