from enum import Enum

class UserRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"

class EmploymentType(str, Enum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACT = "CONTRACT"
    INTERN = "INTERN"

class DocumentStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

class ApprovalLineStatus(str, Enum):
    PENDING = "PENDING"
    APPROVE = "APPROVE"
    REJECT = "REJECT"

class ApprovalAction(str, Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"

class ApprovalHistoryAction(str, Enum):
    DRAFT = "DRAFT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"

class AssignmentType(str, Enum):
    COMPREHENSIVE = "COMPREHENSIVE"          # three or more coordinates changed
    COMPANY_TRANSFER = "COMPANY_TRANSFER"
    BRANCH_TRANSFER = "BRANCH_TRANSFER"      # sub-company changed
    DEPT_TRANSFER_PROMOTION = "DEPT_TRANSFER_PROMOTION"
    DEPT_TRANSFER = "DEPT_TRANSFER"
    POSITION_CHANGE = "POSITION_CHANGE"
    OTHER = "OTHER"

class VacationType(str, Enum):
    ANNUAL = "ANNUAL"
    SICK = "SICK"
    FAMILY_EVENT = "FAMILY_EVENT"
    SPECIAL = "SPECIAL"
