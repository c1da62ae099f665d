# models_bootstrap.py
from user import models as _user_models
from organization import models as _org_models
from employee import models as _employee_models
from department import models as _department_models
from team import models as _team_models
from project import models as _project_models
from attendance import models as _attendance_models
from report import models as _report_models
from invoice import models as _invoice_models
from messaging import models as _messaging_models
from notification import models as _notification_models
from workpolicy import models as _workpolicy_models
from securetoken import models as _securetoken_models
