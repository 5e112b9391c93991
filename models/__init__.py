from .availability import Availability, AvailabilityKind
from .employee import Employee, EmployeeRead, EmployeeRole
from .invitation import Invitation
from .leave_request import LeaveRequest, LeaveStatus, LeaveType
from .notification import Notification, NotificationType
from .shift import Shift, ShiftStatus
from .shift_swap import ShiftSwap, SwapStatus
from .time_registration import TimeRegistration
