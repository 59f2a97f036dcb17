from smarthr.models.organization.company import Company
from smarthr.models.organization.sub_company import SubCompany
from smarthr.models.organization.department import Department
from smarthr.models.organization.position import Position
from smarthr.models.hr.employee import Employee
from smarthr.models.hr.employee_assignment import EmployeeAssignment
from smarthr.models.approval.approval_form import ApprovalForm
from smarthr.models.approval.approval_document import ApprovalDocument
from smarthr.models.approval.approval_line import ApprovalLine
from smarthr.models.approval.approval_history import ApprovalHistory
from smarthr.models.approval.approval_member import ApprovalMember
